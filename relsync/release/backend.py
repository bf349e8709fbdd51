"""Provider contract consumed by the release engine and asset sync.

One implementation exists per hosting provider; the CLI picks one from
configuration at startup. Every operation returns a ``Result`` and never
raises for provider-side failures.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Protocol, runtime_checkable

from relsync.core.result import Err, Ok, Result
from relsync.release.errors import ReleaseError
from relsync.release.model import (
    AssetDescriptor,
    LocalAsset,
    ReleaseFields,
    RemoteRelease,
)

__all__ = ["ReleaseBackend", "ReleasePage", "PAGE_SIZE", "iter_pages"]

PAGE_SIZE = 100

type ReleasePage = Result[list[RemoteRelease], ReleaseError]


@runtime_checkable
class ReleaseBackend(Protocol):
    """Remote release operations for one provider."""

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Result[RemoteRelease, ReleaseError]:
        """Fetch a published release by tag.

        Returns:
            Err with kind ``not_found`` when no release has that tag. Drafts
            are not indexed by tag and are never found here.
        """
        ...

    def list_releases(self, owner: str, repo: str) -> Iterator[ReleasePage]:
        """Lazily yield pages of ``PAGE_SIZE`` releases, drafts included.

        One page is fetched per ``next()``. The sequence ends after an empty
        page or after yielding an error.
        """
        ...

    def create_release(self, owner: str, repo: str, fields: ReleaseFields) -> Result[RemoteRelease, ReleaseError]: ...

    def update_release(
        self, owner: str, repo: str, release_id: int, fields: ReleaseFields
    ) -> Result[RemoteRelease, ReleaseError]: ...

    def delete_asset(self, owner: str, repo: str, release_id: int, asset_id: int) -> Result[None, ReleaseError]: ...

    def upload_asset(self, upload_url: str, asset: LocalAsset) -> Result[AssetDescriptor, ReleaseError]:
        """Upload ``asset`` to a release upload endpoint (``RemoteRelease.upload_url``).

        Returns:
            Err with kind ``upload_failed`` carrying the provider status and
            message on a non-success response.
        """
        ...


def iter_pages(fetch_page: Callable[[int], ReleasePage]) -> Iterator[ReleasePage]:
    """Drive page-numbered listing (1-based) until an empty page or an error.

    Nothing is fetched until the consumer asks for the next page, and a
    consumer that stops iterating never triggers further requests.
    """
    page = 1
    while True:
        result = fetch_page(page)
        yield result
        if isinstance(result, Err):
            return
        if isinstance(result, Ok) and not result.value:
            return
        page += 1
