"""Partition an address list into fixed-size distribution batches."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from .config import DEFAULT_BATCH_SIZE
from .models import Batch

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive slices of at most ``size`` elements."""
    if size < 1:
        raise ValueError("chunk size must be >= 1.")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def build_batches(
    addresses: Sequence[str], amount: int, size: int = DEFAULT_BATCH_SIZE
) -> list[Batch]:
    """Pair each address with ``amount`` and group entries by ``position // size``."""
    return [
        Batch(index=index, entries=tuple((address, amount) for address in group))
        for index, group in enumerate(chunk(addresses, size))
    ]


def format_entry(address: str, amount: int) -> str:
    """Render one disperse line body: ``<address>, <amount>``."""
    return f"{address}, {amount}"
