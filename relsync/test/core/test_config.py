"""Tests for relsync.core.config."""

from __future__ import annotations

from pathlib import Path

from relsync.core.config import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_MAX_RETRIES,
    ActionConfig,
    is_tag,
    load_config,
    parse_files,
    release_body,
    tag_from_ref,
)
from relsync.core.result import Err, Ok

BASE_ENV = {
    "GITHUB_TOKEN": "t0ken",
    "GITHUB_REPOSITORY": "octo/app",
    "GITHUB_REF": "refs/tags/v1.0.0",
}


def _load(**extra: str) -> ActionConfig:
    result = load_config({**BASE_ENV, **extra})
    assert isinstance(result, Ok)
    return result.value


class TestLoadConfig:
    def test_defaults(self) -> None:
        config = _load()
        assert config.token == "t0ken"
        assert config.owner == "octo"
        assert config.repo == "app"
        assert config.ref == "refs/tags/v1.0.0"
        assert config.platform == "github"
        assert config.api_url == DEFAULT_GITHUB_API_URL
        assert config.files == ()
        assert config.max_retries == DEFAULT_MAX_RETRIES
        assert config.append_body is False

    def test_tristate_flags_unset(self) -> None:
        config = _load(INPUT_DRAFT="", INPUT_PRERELEASE="")
        assert config.draft is None
        assert config.prerelease is None
        assert config.generate_release_notes is None

    def test_tristate_flags_explicit(self) -> None:
        config = _load(INPUT_DRAFT="true", INPUT_PRERELEASE="false")
        assert config.draft is True
        assert config.prerelease is False

    def test_input_repository_overrides(self) -> None:
        config = _load(INPUT_REPOSITORY="other/project")
        assert config.repository == "other/project"

    def test_input_token_overrides(self) -> None:
        assert _load(INPUT_TOKEN="pat").token == "pat"

    def test_files_split_on_newlines_and_commas(self) -> None:
        config = _load(INPUT_FILES="dist/*.whl\n  README.md, LICENSE\n\n")
        assert config.files == ("dist/*.whl", "README.md", "LICENSE")

    def test_gitea_settings(self) -> None:
        config = _load(INPUT_PLATFORM="Gitea", INPUT_URL="https://git.example.com/")
        assert config.platform == "gitea"
        assert config.server_url == "https://git.example.com"

    def test_body_whitespace_preserved(self) -> None:
        assert _load(INPUT_BODY="  indented\n").body == "  indented\n"

    def test_missing_token(self) -> None:
        result = load_config({"GITHUB_REPOSITORY": "octo/app"})
        assert isinstance(result, Err)
        assert result.error.variable == "GITHUB_TOKEN"

    def test_malformed_repository(self) -> None:
        for bad in ("octo", "octo/", "/app", "a/b/c"):
            result = load_config({"GITHUB_TOKEN": "t", "GITHUB_REPOSITORY": bad})
            assert isinstance(result, Err), bad

    def test_max_retries(self) -> None:
        assert _load(INPUT_MAX_RETRIES="5").max_retries == 5
        assert isinstance(load_config({**BASE_ENV, "INPUT_MAX_RETRIES": "lots"}), Err)
        assert isinstance(load_config({**BASE_ENV, "INPUT_MAX_RETRIES": "0"}), Err)


class TestTagHelpers:
    def test_is_tag(self) -> None:
        assert is_tag("refs/tags/v1")
        assert not is_tag("refs/heads/main")

    def test_tag_from_ref(self) -> None:
        assert tag_from_ref("refs/tags/release/2024-01") == "release/2024-01"
        assert tag_from_ref("refs/heads/main") is None


class TestReleaseBody:
    def test_body_path_wins(self, tmp_path: Path) -> None:
        notes = tmp_path / "notes.md"
        notes.write_text("from file")
        config = ActionConfig(token="t", repository="o/r", body="inline", body_path=str(notes))
        assert release_body(config) == Ok("from file")

    def test_inline_body(self) -> None:
        assert release_body(ActionConfig(token="t", repository="o/r", body="inline")) == Ok("inline")

    def test_missing_body_path_is_an_error(self, tmp_path: Path) -> None:
        config = ActionConfig(token="t", repository="o/r", body="inline", body_path=str(tmp_path / "nope"))
        result = release_body(config)
        assert isinstance(result, Err)
        assert result.error.variable == "INPUT_BODY_PATH"
        assert "nope" in result.error.message

    def test_undecodable_body_path_is_an_error(self, tmp_path: Path) -> None:
        notes = tmp_path / "notes.bin"
        notes.write_bytes(b"\xff\xfe\xfa")
        config = ActionConfig(token="t", repository="o/r", body_path=str(notes))
        assert isinstance(release_body(config), Err)

    def test_no_body(self) -> None:
        assert release_body(ActionConfig(token="t", repository="o/r")) == Ok(None)


def test_parse_files_empty() -> None:
    assert parse_files("") == ()
    assert parse_files(" , \n") == ()
