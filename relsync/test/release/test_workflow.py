from __future__ import annotations

from pathlib import Path

from relsync.core.config import ActionConfig
from relsync.core.result import Err, Ok
from relsync.output.console import MockConsole
from relsync.release.errors import ReleaseError
from relsync.release.model import ReleaseAsset
from relsync.release.workflow import desired_release, resolve_tag, run_release
from relsync.test.fakes import FakeBackend, conflict, make_release


def _config(**overrides: object) -> ActionConfig:
    values: dict[str, object] = {
        "token": "t0ken",
        "repository": "octo/app",
        "ref": "refs/tags/v1.0.0",
    }
    values.update(overrides)
    return ActionConfig(**values)  # type: ignore[arg-type]


class TestResolveTag:
    def test_explicit_tag_wins(self) -> None:
        assert resolve_tag(_config(tag_name="v2.0.0")) == "v2.0.0"

    def test_tag_from_ref(self) -> None:
        assert resolve_tag(_config()) == "v1.0.0"

    def test_branch_ref_has_no_tag(self) -> None:
        assert resolve_tag(_config(ref="refs/heads/main")) is None


def test_desired_release_reads_body_file(tmp_path: Path) -> None:
    notes = tmp_path / "NOTES.md"
    notes.write_text("from file\n")
    result = desired_release(_config(body="inline", body_path=str(notes)), "v1.0.0")
    assert isinstance(result, Ok)
    desired = result.value
    assert desired.owner == "octo"
    assert desired.repo == "app"
    assert desired.body == "from file\n"


def test_unreadable_body_file_fails_before_any_call(tmp_path: Path) -> None:
    backend = FakeBackend(releases={"v1.0.0": make_release(body="old")})
    config = _config(body="fallback", body_path=str(tmp_path / "missing.md"), append_body=True)

    result = run_release(config, backend, MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "body_unreadable"
    assert backend.calls == []
    assert backend.updated == []


def test_missing_tag_fails_before_any_call() -> None:
    backend = FakeBackend()
    result = run_release(_config(ref="refs/heads/main"), backend, MockConsole())
    assert isinstance(result, Err)
    assert result.error.kind == "missing_tag"
    assert backend.calls == []


def test_draft_without_tag_is_allowed() -> None:
    backend = FakeBackend()
    result = run_release(_config(ref="refs/heads/main", draft=True), backend, MockConsole())
    assert isinstance(result, Ok)


def test_unmatched_files_warn_by_default(tmp_path: Path) -> None:
    backend = FakeBackend()
    console = MockConsole()
    result = run_release(_config(files=("*.exe",)), backend, console, root=tmp_path)
    assert isinstance(result, Ok)
    assert console.find("Pattern '*.exe' does not match any files.")
    assert backend.call_names() == ["get_release_by_tag", "create_release"]


def test_unmatched_files_fail_when_strict(tmp_path: Path) -> None:
    backend = FakeBackend()
    result = run_release(
        _config(files=("*.exe",), fail_on_unmatched_files=True), backend, MockConsole(), root=tmp_path
    )
    assert isinstance(result, Err)
    assert result.error.kind == "unmatched_files"
    assert backend.calls == []


def test_full_run_replaces_existing_asset(tmp_path: Path) -> None:
    (tmp_path / "app.zip").write_bytes(b"zip")
    (tmp_path / "app.sha256").write_text("abc")
    existing = make_release(id=8, assets=(ReleaseAsset(id=77, name="app.zip"),))
    backend = FakeBackend(releases={"v1.0.0": existing})

    result = run_release(_config(files=("app.zip", "app.sha256")), backend, MockConsole(), root=tmp_path)

    assert isinstance(result, Ok)
    outcome = result.value
    assert outcome.success
    assert [d.name for d in outcome.uploaded()] == ["app.zip", "app.sha256"]
    names = backend.call_names()
    assert names.index("delete_asset") < names.index("upload_asset")
    assert ("delete_asset", "octo", "app", 8, 77) in backend.calls


def test_partial_upload_failure_is_reported(tmp_path: Path) -> None:
    (tmp_path / "a.zip").write_bytes(b"a")
    (tmp_path / "b.zip").write_bytes(b"b")
    error = ReleaseError(kind="upload_failed", message="Server Error", status=502)
    backend = FakeBackend(upload_errors={"a.zip": error})
    console = MockConsole()

    result = run_release(_config(files=("*.zip",)), backend, console, root=tmp_path)

    assert isinstance(result, Ok)
    outcome = result.value
    assert not outcome.success
    assert [a.path.name for a in outcome.failed_assets] == ["a.zip"]
    assert [d.name for d in outcome.uploaded()] == ["b.zip"]
    assert console.has_error()


def test_reconcile_error_stops_run(tmp_path: Path) -> None:
    (tmp_path / "a.zip").write_bytes(b"a")
    boom = Err(ReleaseError(kind="request_failed", message="Bad credentials", status=401))
    backend = FakeBackend(lookup_results=[boom])

    result = run_release(_config(files=("a.zip",)), backend, MockConsole(), root=tmp_path)

    assert result == boom
    assert "upload_asset" not in backend.call_names()


def test_max_retries_from_config_bounds_attempts() -> None:
    backend = FakeBackend(create_results=[conflict(), conflict()])
    result = run_release(_config(max_retries=2), backend, MockConsole())
    assert isinstance(result, Err)
    assert result.error.kind == "aborted_after_retries"
    assert backend.call_names().count("create_release") == 2


def test_duplicate_asset_names_fail_before_any_call(tmp_path: Path) -> None:
    for sub in ("linux", "macos"):
        (tmp_path / sub).mkdir()
        (tmp_path / sub / "app.zip").write_bytes(b"zip")
    backend = FakeBackend()

    result = run_release(_config(files=("*/app.zip",)), backend, MockConsole(), root=tmp_path)

    assert isinstance(result, Err)
    assert result.error.kind == "duplicate_asset_names"
    assert result.error.hint == "app.zip"
    assert backend.calls == []
