"""Protocols and lightweight model types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Protocol


@dataclass(frozen=True)
class SourceItem:
    """One retrieved post."""

    id: str
    text: str


class CandidateKind(str, Enum):
    ADDRESS = "address"
    NAME = "name"


@dataclass(frozen=True)
class RawCandidate:
    """A token pulled from post text that may denote an address or ENS name."""

    token: str
    kind: CandidateKind


@dataclass(frozen=True)
class AddressCheck:
    """Validator outcome; ``address`` is checksummed only when ``valid``."""

    valid: bool
    address: str


@dataclass(frozen=True)
class PostPage:
    items: list[SourceItem]
    next_token: str | None = None


@dataclass(frozen=True)
class FollowerIdPage:
    ids: list[str]
    next_cursor: str | None = None


@dataclass(frozen=True)
class Batch:
    """Up to one full batch of ``(address, amount)`` entries."""

    index: int
    entries: tuple[tuple[str, int], ...]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class FollowerProfile:
    """Profile metadata of a single follower."""

    id: str
    name: str
    handle: str
    description: str
    followers_count: int
    following_count: int
    verified: bool
    created_at: str

    @classmethod
    def from_api(cls, user: dict[str, Any]) -> FollowerProfile:
        """Build a profile from a v1.1 ``users/lookup`` user object."""
        return cls(
            id=str(user.get("id_str", "")),
            name=str(user.get("name", "")),
            handle=str(user.get("screen_name", "")),
            description=str(user.get("description") or ""),
            followers_count=int(user.get("followers_count") or 0),
            following_count=int(user.get("friends_count") or 0),
            verified=bool(user.get("verified", False)),
            created_at=str(user.get("created_at", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class PostSource(Protocol):
    """Contract for paginated conversation reads."""

    def fetch_page(self, conversation_id: str, next_token: str | None = None) -> PostPage:
        """Return one page of replies, raising FetchError on failure."""


class FollowerSource(Protocol):
    """Contract for follower id paging and bulk profile lookups."""

    def fetch_follower_ids(self, handle: str, cursor: str | None = None) -> FollowerIdPage:
        """Return one page of follower ids."""

    def lookup_users(self, ids: list[str]) -> list[dict[str, Any]]:
        """Return raw user objects for up to 100 ids."""


class NameResolver(Protocol):
    """Contract for ENS name lookups."""

    enabled: bool

    def resolve(self, name: str) -> str | None:
        """Return the address registered for a name, or None."""
