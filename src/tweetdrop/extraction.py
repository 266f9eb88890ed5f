"""Pure extraction of address and ENS name candidates from post text."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import CandidateKind, RawCandidate, SourceItem

ADDRESS_LENGTH = 42
ADDRESS_REGEX = re.compile(r"0x[a-zA-Z0-9]\w+")
ENS_REGEX = re.compile(r"\S+\.eth", re.IGNORECASE)
LINE_BREAK_REGEX = re.compile(r"\r\n|\n|\r")


def strip_line_breaks(text: str) -> str:
    """Remove line breaks so wrapped tokens are matched whole."""
    return LINE_BREAK_REGEX.sub("", text or "")


def match_candidates(text: str) -> list[RawCandidate]:
    """Return the first address-shaped and first ENS-shaped token in text.

    Only the first occurrence of each kind is extracted; any later addresses
    or names in the same post are ignored. Address tokens are cut to 42
    characters without checking the tail, which is left to validation.
    """
    cleaned = strip_line_breaks(text)
    candidates: list[RawCandidate] = []

    address_match = ADDRESS_REGEX.search(cleaned)
    if address_match:
        token = address_match.group(0)[:ADDRESS_LENGTH]
        candidates.append(RawCandidate(token=token, kind=CandidateKind.ADDRESS))

    name_match = ENS_REGEX.search(cleaned)
    if name_match:
        candidates.append(RawCandidate(token=name_match.group(0), kind=CandidateKind.NAME))
    return candidates


def extract_candidates(items: Iterable[SourceItem]) -> list[RawCandidate]:
    """Run the matcher over posts in order."""
    candidates: list[RawCandidate] = []
    for item in items:
        candidates.extend(match_candidates(item.text))
    return candidates


def dedupe_preserve_order(items: list[str]) -> list[str]:
    """Dedupe values while preserving first-seen order."""
    output: list[str] = []
    seen: set[str] = set()
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
