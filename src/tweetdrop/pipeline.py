"""Core orchestration pipeline for conversation airdrops."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from tqdm import tqdm

from .batching import build_batches, format_entry
from .config import DropConfig
from .errors import OutputError
from .extraction import dedupe_preserve_order, extract_candidates
from .io_files import write_batches
from .models import CandidateKind, NameResolver, PostSource, RawCandidate, SourceItem
from .resolver import build_resolver
from .twitter import TwitterClient, make_retry_session
from .validation import validate_address


def collect_posts(
    source: PostSource,
    conversation_id: str,
    *,
    logger: logging.Logger,
    max_pages: int | None = None,
) -> list[SourceItem]:
    """Page through a conversation until the API stops returning a next token."""
    items: list[SourceItem] = []
    next_token: str | None = None
    pages = 0
    while True:
        page = source.fetch_page(conversation_id, next_token)
        pages += 1
        items.extend(page.items)
        logger.info("Collected %d tweets", len(page.items))
        next_token = page.next_token
        if not next_token:
            break
        if max_pages is not None and pages >= max_pages:
            logger.warning("Stopping after %d pages with more replies available.", pages)
            break
    return items


def resolve_candidate(
    candidate: RawCandidate, *, resolver: NameResolver, logger: logging.Logger
) -> str | None:
    """Return the checksummed address for one candidate, or None to drop it."""
    if candidate.kind is CandidateKind.NAME:
        if not resolver.enabled:
            logger.debug("Leaving ENS name unresolved: %s", candidate.token)
            return None
        name = candidate.token.lower()
        resolved = resolver.resolve(name)
        if resolved is None:
            logger.info("Could not resolve ENS name %s", name)
            return None
        token = resolved
    else:
        token = candidate.token

    check = validate_address(token)
    if not check.valid:
        logger.debug("Rejected invalid address: %s", check.address)
        return None
    return check.address


def resolve_candidates(
    candidates: list[RawCandidate],
    *,
    resolver: NameResolver,
    logger: logging.Logger,
    workers: int = 1,
    show_progress: bool = False,
) -> list[str]:
    """Resolve and validate candidates, keeping discovery order."""

    def _resolve(candidate: RawCandidate) -> str | None:
        return resolve_candidate(candidate, resolver=resolver, logger=logger)

    def _drain(results: Iterable[str | None]) -> list[str]:
        if show_progress:
            results = tqdm(results, total=len(candidates), desc="resolving addresses")
        return [address for address in results if address is not None]

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map yields in submission order, whatever order lookups finish in
            return _drain(executor.map(_resolve, candidates))
    return _drain(map(_resolve, candidates))


def collect_addresses(
    config: DropConfig,
    *,
    source: PostSource,
    resolver: NameResolver,
    logger: logging.Logger,
) -> list[str]:
    """Collect replies, extract candidates, and return the final address list."""
    tweets = collect_posts(source, config.conversation_id, logger=logger)
    logger.info("Collected %d total tweets", len(tweets))

    candidates = extract_candidates(tweets)
    logger.info("Collected %d addresses from tweets", len(candidates))

    addresses = resolve_candidates(
        candidates,
        resolver=resolver,
        logger=logger,
        workers=config.workers,
        show_progress=config.show_progress,
    )
    logger.info("Kept %d valid addresses", len(addresses))

    if config.dedupe:
        unique = dedupe_preserve_order(addresses)
        logger.info("Removed %d duplicate addresses", len(addresses) - len(unique))
        addresses = unique
    return addresses


def run_pipeline(config: DropConfig, *, logger: logging.Logger) -> str:
    """Build concrete dependencies, execute pipeline, and write batch files."""
    twitter_session = make_retry_session(config.user_agent, config.bearer_token)
    source = TwitterClient(session=twitter_session, timeout=config.request_timeout, logger=logger)
    rpc_session = make_retry_session(config.user_agent) if config.rpc_url else None
    resolver = build_resolver(
        config.rpc_url,
        session=rpc_session,
        timeout=config.request_timeout,
        logger=logger,
    )

    addresses = collect_addresses(config, source=source, resolver=resolver, logger=logger)
    batches = build_batches(addresses, config.num_tokens)
    try:
        written = write_batches(config.output_dir, batches)
    except OutputError:
        logger.error(
            "Could not write %d collected addresses to %s; unwritten entries follow.",
            len(addresses),
            Path(config.output_dir),
        )
        for batch in batches:
            for address, amount in batch.entries:
                logger.error("batch-%d: %s", batch.index, format_entry(address, amount))
        raise
    logger.info(
        "Wrote %d addresses in %d batch files to %s",
        len(addresses),
        len(written),
        Path(config.output_dir),
    )
    return config.output_dir
