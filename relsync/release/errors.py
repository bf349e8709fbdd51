"""Error types for release reconciliation and asset sync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "not_found",
    "conflict",
    "request_failed",
    "invalid_response",
    "upload_failed",
    "asset_unreadable",
    "body_unreadable",
    "duplicate_asset_names",
    "aborted_after_retries",
    "missing_tag",
    "unmatched_files",
    "unsupported_platform",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical error payload shared by backends, the engine and the CLI.

    ``status`` carries the provider's HTTP status when there was one
    (0 for network-level failures, None when no request was involved).
    """

    kind: ReleaseErrorKind
    message: str
    status: int | None = None
    hint: str | None = None

    @property
    def is_not_found(self) -> bool:
        return self.kind == "not_found"

    def pretty(self) -> str:
        text = self.message
        if self.status:
            text = f"{text} (status {self.status})"
        if self.hint:
            text = f"{text} (hint: {self.hint})"
        return text
