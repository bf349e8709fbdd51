from __future__ import annotations

import json
import os
from pathlib import Path

import typer

from relsync.cli.context import CLIContext, build_context
from relsync.core.errors import ErrorCode
from relsync.core.result import Err
from relsync.output.actions import write_outputs
from relsync.output.console import Style
from relsync.release.errors import ReleaseErrorKind
from relsync.release.workflow import PublishOutcome, run_release


def release_error_code(kind: ReleaseErrorKind) -> ErrorCode:
    if kind in {"missing_tag", "unmatched_files", "duplicate_asset_names"}:
        return ErrorCode.USER_ERROR
    if kind == "unsupported_platform":
        return ErrorCode.CONFIG_ERROR
    if kind in {"asset_unreadable", "body_unreadable"}:
        return ErrorCode.IO_ERROR
    return ErrorCode.RELEASE_ERROR


def outcome_outputs(outcome: PublishOutcome) -> dict[str, str]:
    release = outcome.release
    values = {
        "url": release.html_url,
        "id": str(release.id),
        "upload_url": release.upload_url,
    }
    if outcome.assets:
        values["assets"] = json.dumps([a.as_dict() for a in outcome.uploaded()])
    return values


def _write_step_outputs(ctx: CLIContext, outcome: PublishOutcome) -> None:
    target = os.environ.get("GITHUB_OUTPUT")
    if not target:
        return
    written = write_outputs(Path(target), outcome_outputs(outcome))
    if isinstance(written, Err):
        ctx.console.warning(written.error)


def publish(
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Directory that file patterns are resolved against (default: cwd).",
    ),
) -> None:
    """Create or update the release described by the environment and upload its files."""
    ctx = build_context()

    result = run_release(ctx.config, ctx.backend, ctx.console, root=root)
    if isinstance(result, Err):
        ctx.console.error(f"Failed to create the new release: {result.error.pretty()}")
        raise typer.Exit(code=int(release_error_code(result.error.kind)))

    outcome = result.value
    _write_step_outputs(ctx, outcome)
    ctx.console.print(f"id: {outcome.release.id}", Style.DIM)
    ctx.console.print(f"upload_url: {outcome.release.upload_url}", Style.DIM)

    failed = outcome.failed_assets
    if failed:
        names = ", ".join(a.path.name for a in failed)
        ctx.console.error(f"{len(failed)} of {len(outcome.assets)} asset uploads failed: {names}")
        kinds = {a.result.error.kind for a in failed if isinstance(a.result, Err)}
        code = ErrorCode.IO_ERROR if kinds == {"asset_unreadable"} else ErrorCode.RELEASE_ERROR
        raise typer.Exit(code=int(code))
