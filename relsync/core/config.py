"""Typed configuration loaded from a CI step environment.

Inputs arrive as ``INPUT_*`` variables next to the runner's ``GITHUB_*``
variables. This module turns them into an immutable ``ActionConfig``; nothing
else in the package reads the environment.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "ActionConfig",
    "ConfigError",
    "load_config",
    "parse_files",
    "release_body",
    "is_tag",
    "tag_from_ref",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_GITHUB_API_URL",
    "DEFAULT_GITEA_URL",
]

DEFAULT_MAX_RETRIES = 3
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITEA_URL = "https://gitea.com"

_TAG_REF_PREFIX = "refs/tags/"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the environment cannot be turned into a config."""

    message: str
    variable: str | None = None


@dataclass(frozen=True, slots=True)
class ActionConfig:
    """Resolved release inputs.

    ``draft`` and ``prerelease`` are tri-state: ``None`` means "not given",
    which lets an update keep whatever the existing release has.
    """

    token: str
    repository: str
    ref: str = ""
    platform: str = "github"
    api_url: str = DEFAULT_GITHUB_API_URL
    server_url: str = DEFAULT_GITEA_URL
    name: str | None = None
    tag_name: str | None = None
    body: str | None = None
    body_path: str | None = None
    files: tuple[str, ...] = ()
    draft: bool | None = None
    prerelease: bool | None = None
    append_body: bool = False
    fail_on_unmatched_files: bool = False
    target_commitish: str | None = None
    discussion_category_name: str | None = None
    generate_release_notes: bool | None = None
    max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]


def is_tag(ref: str) -> bool:
    return ref.startswith(_TAG_REF_PREFIX)


def tag_from_ref(ref: str) -> str | None:
    """Return the tag name for a ``refs/tags/...`` ref, else None."""
    if not is_tag(ref):
        return None
    return ref[len(_TAG_REF_PREFIX) :]


def parse_files(raw: str) -> tuple[str, ...]:
    """Split a files input on newlines and commas, dropping blanks."""
    parts = re.split(r"[\r\n,]", raw)
    return tuple(p.strip() for p in parts if p.strip())


def release_body(config: ActionConfig) -> Result[str | None, ConfigError]:
    """Body text for the release: ``body_path`` contents win over ``body``.

    A ``body_path`` that cannot be read is an error, never a silent fallback.
    """
    if config.body_path:
        try:
            return Ok(Path(config.body_path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            return Err(ConfigError(f"cannot read body file '{config.body_path}': {e}", "INPUT_BODY_PATH"))
    return Ok(config.body or None)


def _get(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _flag(env: Mapping[str, str], key: str) -> bool:
    return _get(env, key) == "true"


def _tristate(env: Mapping[str, str], key: str) -> bool | None:
    value = _get(env, key)
    if value is None:
        return None
    return value == "true"


def load_config(env: Mapping[str, str]) -> Result[ActionConfig, ConfigError]:
    """Build an ``ActionConfig`` from an environment mapping.

    Args:
        env: Usually ``os.environ``.

    Returns:
        Ok(ActionConfig) on success, Err(ConfigError) when a required value
        is missing or malformed.
    """
    token = _get(env, "INPUT_TOKEN") or _get(env, "GITHUB_TOKEN")
    if token is None:
        return Err(ConfigError("a token is required (INPUT_TOKEN or GITHUB_TOKEN)", "GITHUB_TOKEN"))

    repository = _get(env, "INPUT_REPOSITORY") or _get(env, "GITHUB_REPOSITORY")
    if repository is None:
        return Err(ConfigError("repository is not set", "GITHUB_REPOSITORY"))
    owner, _, repo = repository.partition("/")
    if not owner or not repo or "/" in repo:
        return Err(
            ConfigError(f"repository must look like owner/repo, got '{repository}'", "GITHUB_REPOSITORY")
        )

    max_retries = DEFAULT_MAX_RETRIES
    raw_retries = _get(env, "INPUT_MAX_RETRIES")
    if raw_retries is not None:
        try:
            max_retries = int(raw_retries)
        except ValueError:
            return Err(ConfigError(f"max retries must be an integer, got '{raw_retries}'", "INPUT_MAX_RETRIES"))
        if max_retries < 1:
            return Err(ConfigError("max retries must be at least 1", "INPUT_MAX_RETRIES"))

    raw_files = env.get("INPUT_FILES") or ""

    return Ok(
        ActionConfig(
            token=token,
            repository=repository,
            ref=_get(env, "GITHUB_REF") or "",
            platform=(_get(env, "INPUT_PLATFORM") or "github").lower(),
            api_url=(_get(env, "GITHUB_API_URL") or DEFAULT_GITHUB_API_URL).rstrip("/"),
            server_url=(_get(env, "INPUT_URL") or DEFAULT_GITEA_URL).rstrip("/"),
            name=_get(env, "INPUT_NAME"),
            tag_name=_get(env, "INPUT_TAG_NAME"),
            # Body text is user content; keep surrounding whitespace.
            body=env.get("INPUT_BODY") or None,
            body_path=_get(env, "INPUT_BODY_PATH"),
            files=parse_files(raw_files),
            draft=_tristate(env, "INPUT_DRAFT"),
            prerelease=_tristate(env, "INPUT_PRERELEASE"),
            append_body=_flag(env, "INPUT_APPEND_BODY"),
            fail_on_unmatched_files=_flag(env, "INPUT_FAIL_ON_UNMATCHED_FILES"),
            target_commitish=_get(env, "INPUT_TARGET_COMMITISH"),
            discussion_category_name=_get(env, "INPUT_DISCUSSION_CATEGORY_NAME"),
            generate_release_notes=_tristate(env, "INPUT_GENERATE_RELEASE_NOTES"),
            max_retries=max_retries,
        )
    )
