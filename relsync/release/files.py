"""Expand file patterns from the files input into concrete paths."""

from __future__ import annotations

import glob
from collections.abc import Sequence
from pathlib import Path


def _matches(pattern: str, root: Path | None) -> list[Path]:
    found = glob.glob(pattern, root_dir=root, recursive=True)
    base = root or Path()
    return [base / match for match in sorted(found)]


def expand_patterns(patterns: Sequence[str], *, root: Path | None = None) -> list[Path]:
    """Regular files matched by ``patterns``, in pattern order, without duplicates.

    Directories are skipped. Relative patterns resolve against ``root``
    (the current directory when None).
    """
    seen: set[Path] = set()
    out: list[Path] = []
    for pattern in patterns:
        for path in _matches(pattern, root):
            if not path.is_file():
                continue
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            out.append(path)
    return out


def unmatched_patterns(patterns: Sequence[str], *, root: Path | None = None) -> list[str]:
    """Patterns that match no regular file."""
    return [p for p in patterns if not any(path.is_file() for path in _matches(p, root))]


def duplicate_names(paths: Sequence[Path]) -> list[str]:
    """Asset names shared by more than one path, in first-seen order.

    Uploads are keyed by file name, so two such paths would race on one asset.
    """
    seen: set[str] = set()
    dupes: list[str] = []
    for path in paths:
        if path.name in seen and path.name not in dupes:
            dupes.append(path.name)
        seen.add(path.name)
    return dupes
