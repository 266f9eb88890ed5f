"""Runtime configuration models."""

from __future__ import annotations

from dataclasses import dataclass

from .validation import validate_drop_constraints, validate_follower_constraints

DEFAULT_USER_AGENT = "tweetdrop/1.0"
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_BATCH_SIZE = 100
DEFAULT_MAX_FOLLOWERS = 15000
DEFAULT_IDS_OUTPUT = "follower-ids.json"
DEFAULT_DETAILS_OUTPUT = "follower-details.json"


@dataclass(frozen=True)
class DropConfig:
    """Validated configuration for scraping a conversation into batches."""

    conversation_id: str
    bearer_token: str
    num_tokens: int
    rpc_url: str | None = None
    output_dir: str = DEFAULT_OUTPUT_DIR
    dedupe: bool = False
    workers: int = 1
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    show_progress: bool = True

    def __post_init__(self) -> None:
        validate_drop_constraints(
            conversation_id=self.conversation_id,
            bearer_token=self.bearer_token,
            num_tokens=self.num_tokens,
            output_dir=self.output_dir,
            workers=self.workers,
        )


@dataclass(frozen=True)
class FollowerConfig:
    """Validated configuration for collecting an account's followers."""

    bearer_token: str
    handle: str
    max_followers: int = DEFAULT_MAX_FOLLOWERS
    ids_output: str = DEFAULT_IDS_OUTPUT
    details_output: str = DEFAULT_DETAILS_OUTPUT
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    show_progress: bool = True

    def __post_init__(self) -> None:
        validate_follower_constraints(
            bearer_token=self.bearer_token,
            handle=self.handle,
            max_followers=self.max_followers,
        )
