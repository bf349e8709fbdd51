"""Local asset resolution and release asset sync.

For every local file the release's existing asset with the same name is
deleted first, then the file is uploaded. Providers have no atomic replace,
and uploading onto an existing name is rejected.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from relsync.core.result import Err, Ok, Result
from relsync.output.console import ConsoleProtocol
from relsync.release.backend import ReleaseBackend
from relsync.release.errors import ReleaseError
from relsync.release.model import AssetDescriptor, LocalAsset, RemoteRelease

__all__ = [
    "DEFAULT_MIME",
    "MAX_CONCURRENT_UPLOADS",
    "mime_or_default",
    "resolve_local_asset",
    "sync_asset",
    "sync_assets",
]

DEFAULT_MIME = "application/octet-stream"
MAX_CONCURRENT_UPLOADS = 8


def mime_or_default(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name, strict=False)
    return mime or DEFAULT_MIME


def resolve_local_asset(path: Path) -> Result[LocalAsset, ReleaseError]:
    """Read ``path`` into a ``LocalAsset`` named after its basename."""
    try:
        data = path.read_bytes()
    except OSError as e:
        return Err(
            ReleaseError(
                kind="asset_unreadable",
                message=f"cannot read asset {path}: {e.strerror or e}",
            )
        )
    return Ok(LocalAsset(name=path.name, mime=mime_or_default(path), size=len(data), data=data))


def sync_asset(
    *,
    owner: str,
    repo: str,
    release: RemoteRelease,
    path: Path,
    backend: ReleaseBackend,
    console: ConsoleProtocol,
) -> Result[AssetDescriptor, ReleaseError]:
    """Replace (or add) one file on ``release``. Upload failures are not retried."""
    local = resolve_local_asset(path)
    if isinstance(local, Err):
        return local
    asset = local.value

    current = release.asset_named(asset.name)
    if current is not None:
        console.info(f"Deleting previously uploaded asset {asset.name}...")
        deleted = backend.delete_asset(owner, repo, release.id, current.id)
        if isinstance(deleted, Err):
            return deleted

    console.info(f"Uploading {asset.name}...")
    return backend.upload_asset(release.upload_url, asset)


def sync_assets(
    *,
    owner: str,
    repo: str,
    release: RemoteRelease,
    paths: Sequence[Path],
    backend: ReleaseBackend,
    console: ConsoleProtocol,
    max_workers: int = MAX_CONCURRENT_UPLOADS,
) -> list[Result[AssetDescriptor, ReleaseError]]:
    """Sync every path concurrently; one result per path, in input order.

    A failed file never stops its siblings.
    """
    if not paths:
        return []

    def run(path: Path) -> Result[AssetDescriptor, ReleaseError]:
        return sync_asset(
            owner=owner,
            repo=repo,
            release=release,
            path=path,
            backend=backend,
            console=console,
        )

    workers = max(1, min(max_workers, len(paths)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="relsync-upload") as pool:
        return list(pool.map(run, paths))
