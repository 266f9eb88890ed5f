"""Address validation and runtime guardrails."""

from __future__ import annotations

import re

from eth_utils import to_checksum_address

from .errors import ConfigError
from .models import AddressCheck

HEX_ADDRESS_REGEX = re.compile(r"0x[0-9a-fA-F]{40}")


def _has_checksum_casing(body: str) -> bool:
    return body != body.lower() and body != body.upper()


def validate_address(candidate: str) -> AddressCheck:
    """Return the EIP-55 checksummed address, or the input marked invalid.

    Lower-case and upper-case hex are accepted as-is. A mixed-case address is
    treated as already checksummed and rejected when the checksum mismatches.
    """
    if not isinstance(candidate, str) or not HEX_ADDRESS_REGEX.fullmatch(candidate):
        return AddressCheck(valid=False, address=candidate)
    checksummed = to_checksum_address(candidate.lower())
    if _has_checksum_casing(candidate[2:]) and candidate != checksummed:
        return AddressCheck(valid=False, address=candidate)
    return AddressCheck(valid=True, address=checksummed)


def require_value(value: str | None, name: str) -> str:
    """Return a stripped required setting or raise ConfigError."""
    if value is None or not str(value).strip():
        raise ConfigError(f"Missing required parameter {name}; update .env or pass it as a flag.")
    return str(value).strip()


def parse_token_amount(raw: str | int | None) -> int:
    """Parse the per-address token amount."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ConfigError("Missing required parameter NUM_TOKENS; update .env or pass --num-tokens.")
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"NUM_TOKENS must be an integer, got {raw!r}.") from exc


def validate_drop_constraints(
    *,
    conversation_id: str,
    bearer_token: str,
    num_tokens: int,
    output_dir: str,
    workers: int,
) -> None:
    """Validate airdrop run configuration and raise ConfigError on invalid values."""
    require_value(conversation_id, "CONVERSATION_ID")
    require_value(bearer_token, "TWITTER_BEARER")
    require_value(output_dir, "--output-dir")
    if num_tokens < 0:
        raise ConfigError("NUM_TOKENS must be >= 0.")
    if workers < 1:
        raise ConfigError("--workers must be >= 1.")


def validate_follower_constraints(
    *,
    bearer_token: str,
    handle: str,
    max_followers: int,
) -> None:
    """Validate follower run configuration and raise ConfigError on invalid values."""
    require_value(bearer_token, "TWITTER_BEARER")
    require_value(handle, "TWITTER_USER")
    if max_followers < 1:
        raise ConfigError("--max-followers must be >= 1.")
