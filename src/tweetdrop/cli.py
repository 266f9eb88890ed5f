"""CLI entrypoint for tweetdrop."""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence

from dotenv import load_dotenv

from .config import (
    DEFAULT_DETAILS_OUTPUT,
    DEFAULT_IDS_OUTPUT,
    DEFAULT_MAX_FOLLOWERS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REQUEST_TIMEOUT,
    DropConfig,
    FollowerConfig,
)
from .errors import ConfigError, FetchError, OutputError
from .followers import run_followers
from .logging_utils import DEFAULT_LOG_FILE, configure_logging, get_logger
from .pipeline import run_pipeline
from .validation import parse_token_amount, require_value


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--bearer", help="Twitter API bearer token (or set TWITTER_BEARER).")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="HTTP request timeout in seconds.",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable tqdm progress bars.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument(
        "--log-file",
        default=DEFAULT_LOG_FILE,
        help="Also write logs to this file (pass an empty string to disable).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="tweetdrop - collect addresses from tweet replies into airdrop batches."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    drop = commands.add_parser("drop", help="Scrape a conversation into batch files.")
    _add_common_arguments(drop)
    drop.add_argument("--conversation-id", help="Root tweet id (or set CONVERSATION_ID).")
    drop.add_argument("--num-tokens", help="Tokens per address (or set NUM_TOKENS).")
    drop.add_argument(
        "--rpc-provider",
        help="Ethereum JSON-RPC URL used to resolve ENS names (or set RPC_PROVIDER).",
    )
    drop.add_argument(
        "--output-dir", default=DEFAULT_OUTPUT_DIR, help="Directory for batch-<n>.txt files."
    )
    drop.add_argument(
        "--dedupe",
        action="store_true",
        help="Drop repeated addresses, keeping the first mention.",
    )
    drop.add_argument(
        "--workers", type=int, default=1, help="Concurrent ENS lookups (order is preserved)."
    )

    followers = commands.add_parser("followers", help="Collect an account's followers.")
    _add_common_arguments(followers)
    followers.add_argument("--handle", help="Account to scrape (or set TWITTER_USER).")
    followers.add_argument(
        "--max-followers",
        type=int,
        default=DEFAULT_MAX_FOLLOWERS,
        help="Stop paging once this many ids are collected.",
    )
    followers.add_argument("--ids-output", default=DEFAULT_IDS_OUTPUT, help="Follower id JSON path.")
    followers.add_argument(
        "--details-output", default=DEFAULT_DETAILS_OUTPUT, help="Follower profile JSON path."
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI input."""
    return build_parser().parse_args(argv)


def namespace_to_drop_config(args: argparse.Namespace) -> DropConfig:
    """Convert CLI args and environment to a validated DropConfig."""
    conversation_id = require_value(
        args.conversation_id or os.getenv("CONVERSATION_ID"), "CONVERSATION_ID"
    )
    bearer_token = require_value(args.bearer or os.getenv("TWITTER_BEARER"), "TWITTER_BEARER")
    num_tokens = parse_token_amount(
        args.num_tokens if args.num_tokens is not None else os.getenv("NUM_TOKENS")
    )
    rpc_url = args.rpc_provider or os.getenv("RPC_PROVIDER") or None
    return DropConfig(
        conversation_id=conversation_id,
        bearer_token=bearer_token,
        num_tokens=num_tokens,
        rpc_url=rpc_url,
        output_dir=args.output_dir,
        dedupe=bool(args.dedupe),
        workers=args.workers,
        request_timeout=args.timeout,
        show_progress=not args.no_progress,
    )


def namespace_to_follower_config(args: argparse.Namespace) -> FollowerConfig:
    """Convert CLI args and environment to a validated FollowerConfig."""
    bearer_token = require_value(args.bearer or os.getenv("TWITTER_BEARER"), "TWITTER_BEARER")
    handle = require_value(args.handle or os.getenv("TWITTER_USER"), "TWITTER_USER")
    return FollowerConfig(
        bearer_token=bearer_token,
        handle=handle,
        max_followers=args.max_followers,
        ids_output=args.ids_output,
        details_output=args.details_output,
        request_timeout=args.timeout,
        show_progress=not args.no_progress,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    load_dotenv(override=False)
    configure_logging(args.verbose, args.log_file or None)
    logger = get_logger()

    try:
        if args.command == "drop":
            drop_config = namespace_to_drop_config(args)
        else:
            follower_config = namespace_to_follower_config(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    try:
        if args.command == "drop":
            output = run_pipeline(drop_config, logger=logger)
            logger.info("Outputted addresses in 100-address batches to %s", output)
        else:
            ids_path, details_path = run_followers(follower_config, logger=logger)
            logger.info("Wrote follower ids to %s and details to %s", ids_path, details_path)
    except (FetchError, OutputError) as exc:
        logger.error("Run aborted: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
