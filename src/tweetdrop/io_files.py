"""Batch file and JSON document writers."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .batching import format_entry
from .errors import OutputError
from .models import Batch


def batch_path(output_dir: str | Path, index: int) -> Path:
    return Path(output_dir) / f"batch-{index}.txt"


def write_batches(output_dir: str | Path, batches: Iterable[Batch]) -> list[Path]:
    """Append every batch to ``batch-<index>.txt`` under ``output_dir``.

    Files are opened in append mode, so running twice against the same
    directory duplicates lines. Clear the directory between runs.
    """
    directory = Path(output_dir)
    written: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for batch in batches:
            path = batch_path(directory, batch.index)
            with path.open("a", encoding="utf-8") as file_obj:
                for address, amount in batch.entries:
                    file_obj.write(format_entry(address, amount) + "\n")
            written.append(path)
    except OSError as exc:
        raise OutputError(f"Could not write batches to {directory}: {exc}") from exc
    return written


def write_json(path: str | Path, payload: Any) -> None:
    """Serialize a JSON document, replacing any existing file."""
    output_path = Path(path)
    try:
        with output_path.open("w", encoding="utf-8") as file_obj:
            json.dump(payload, file_obj)
    except OSError as exc:
        raise OutputError(f"Could not write {output_path}: {exc}") from exc
