"""Step outputs for the CI runner.

Outputs are appended to the file named by ``GITHUB_OUTPUT``. Single-line
values use ``name=value``; multi-line values use the heredoc form with a
random delimiter so the value cannot terminate it early.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from uuid import uuid4

from relsync.core.result import Err, Ok, Result

__all__ = ["format_outputs", "write_outputs"]


def format_outputs(values: Mapping[str, str]) -> str:
    lines: list[str] = []
    for name, value in values.items():
        if "\n" in value or "\r" in value:
            delimiter = f"ghadelimiter_{uuid4()}"
            lines.append(f"{name}<<{delimiter}")
            lines.append(value)
            lines.append(delimiter)
        else:
            lines.append(f"{name}={value}")
    return "".join(f"{line}\n" for line in lines)


def write_outputs(path: Path, values: Mapping[str, str]) -> Result[None, str]:
    """Append ``values`` to the outputs file at ``path``."""
    try:
        with path.open("a", encoding="utf-8") as f:
            f.write(format_outputs(values))
    except OSError as e:
        return Err(f"cannot write step outputs to {path}: {e}")
    return Ok(None)
