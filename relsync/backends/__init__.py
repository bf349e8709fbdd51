"""Provider backends and backend selection."""

from __future__ import annotations

from relsync.backends.gitea import GiteaBackend
from relsync.backends.github import GitHubBackend
from relsync.backends.http import HttpClient
from relsync.core.config import ActionConfig
from relsync.core.result import Err, Ok, Result
from relsync.output.console import ConsoleProtocol
from relsync.release.backend import ReleaseBackend
from relsync.release.errors import ReleaseError

__all__ = ["GiteaBackend", "GitHubBackend", "SUPPORTED_PLATFORMS", "select_backend"]

SUPPORTED_PLATFORMS = ("github", "gitea")


def select_backend(
    config: ActionConfig,
    http: HttpClient,
    console: ConsoleProtocol,
) -> Result[ReleaseBackend, ReleaseError]:
    """Build the backend named by ``config.platform``."""
    match config.platform:
        case "github":
            return Ok(GitHubBackend(http=http, token=config.token, console=console, api_url=config.api_url))
        case "gitea":
            return Ok(GiteaBackend(http=http, token=config.token, server_url=config.server_url))
        case other:
            return Err(
                ReleaseError(
                    kind="unsupported_platform",
                    message=f"Unsupported platform: {other}",
                    hint=f"expected one of: {', '.join(SUPPORTED_PLATFORMS)}",
                )
            )
