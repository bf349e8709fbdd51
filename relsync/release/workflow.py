"""End-to-end publish run: validate inputs, reconcile the release, sync assets."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relsync.core.config import ActionConfig, release_body, tag_from_ref
from relsync.core.result import Err, Ok, Result
from relsync.output.console import ConsoleProtocol, Style
from relsync.release.assets import sync_assets
from relsync.release.backend import ReleaseBackend
from relsync.release.engine import reconcile
from relsync.release.errors import ReleaseError
from relsync.release.files import duplicate_names, expand_patterns, unmatched_patterns
from relsync.release.model import AssetDescriptor, DesiredRelease, RemoteRelease

__all__ = [
    "AssetOutcome",
    "PublishOutcome",
    "desired_release",
    "resolve_tag",
    "run_release",
]


@dataclass(frozen=True, slots=True)
class AssetOutcome:
    path: Path
    result: Result[AssetDescriptor, ReleaseError]

    @property
    def ok(self) -> bool:
        return isinstance(self.result, Ok)


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    """Resolved release plus one upload outcome per matched file."""

    release: RemoteRelease
    assets: tuple[AssetOutcome, ...] = ()

    @property
    def failed_assets(self) -> tuple[AssetOutcome, ...]:
        return tuple(a for a in self.assets if not a.ok)

    @property
    def success(self) -> bool:
        return not self.failed_assets

    def uploaded(self) -> list[AssetDescriptor]:
        return [a.result.value for a in self.assets if isinstance(a.result, Ok)]


def resolve_tag(config: ActionConfig) -> str | None:
    """Explicit tag input, else the tag named by a ``refs/tags/`` ref."""
    return config.tag_name or tag_from_ref(config.ref)


def desired_release(config: ActionConfig, tag: str) -> Result[DesiredRelease, ReleaseError]:
    body = release_body(config)
    if isinstance(body, Err):
        return Err(
            ReleaseError(
                kind="body_unreadable",
                message=body.error.message,
                hint=f"check {body.error.variable}",
            )
        )
    return Ok(
        DesiredRelease(
            owner=config.owner,
            repo=config.repo,
            tag=tag,
            name=config.name,
            body=body.value,
            append_body=config.append_body,
            draft=config.draft,
            prerelease=config.prerelease,
            target_commitish=config.target_commitish,
            discussion_category_name=config.discussion_category_name,
            generate_release_notes=config.generate_release_notes,
        )
    )


def run_release(
    config: ActionConfig,
    backend: ReleaseBackend,
    console: ConsoleProtocol,
    *,
    root: Path | None = None,
) -> Result[PublishOutcome, ReleaseError]:
    """Publish the release described by ``config``.

    Returns:
        Err for failures that stop the run: a missing tag, strict unmatched
        files, two files sharing an asset name, an unreadable body file or a
        reconciliation error. Upload failures do not stop the run; they are
        reported per file in the outcome.
    """
    tag = resolve_tag(config)
    if tag is None and not config.draft:
        return Err(
            ReleaseError(
                kind="missing_tag",
                message="a release requires a tag",
                hint="set tag_name or run on a tag ref",
            )
        )

    paths: list[Path] = []
    if config.files:
        unmatched = unmatched_patterns(config.files, root=root)
        for pattern in unmatched:
            console.warning(f"Pattern '{pattern}' does not match any files.")
        if unmatched and config.fail_on_unmatched_files:
            return Err(
                ReleaseError(
                    kind="unmatched_files",
                    message="There were unmatched files",
                    hint=", ".join(unmatched),
                )
            )
        paths = expand_patterns(config.files, root=root)
        if not paths:
            console.warning(f"{', '.join(config.files)} does not include a valid file.")
        dupes = duplicate_names(paths)
        if dupes:
            return Err(
                ReleaseError(
                    kind="duplicate_asset_names",
                    message="Several files would upload under the same asset name",
                    hint=", ".join(dupes),
                )
            )

    desired = desired_release(config, tag or "")
    if isinstance(desired, Err):
        return desired
    reconciled = reconcile(desired.value, backend, console, max_attempts=config.max_retries)
    if isinstance(reconciled, Err):
        return reconciled
    release = reconciled.value

    outcomes: tuple[AssetOutcome, ...] = ()
    if config.files:
        results = sync_assets(
            owner=config.owner,
            repo=config.repo,
            release=release,
            paths=paths,
            backend=backend,
            console=console,
        )
        outcomes = tuple(AssetOutcome(path=p, result=r) for p, r in zip(paths, results, strict=True))
        for outcome in outcomes:
            if isinstance(outcome.result, Err):
                console.error(f"{outcome.path.name}: {outcome.result.error.pretty()}")

    console.print(f"Release ready at {release.html_url}", Style.SUCCESS)
    return Ok(PublishOutcome(release=release, assets=outcomes))
