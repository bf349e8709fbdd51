from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DesiredRelease:
    """What the caller wants the release to look like.

    ``draft``, ``prerelease`` and ``generate_release_notes`` are tri-state:
    ``None`` means "keep what the existing release has" on update.
    """

    owner: str
    repo: str
    tag: str
    name: str | None = None
    body: str | None = None
    append_body: bool = False
    draft: bool | None = None
    prerelease: bool | None = None
    target_commitish: str | None = None
    discussion_category_name: str | None = None
    generate_release_notes: bool | None = None


@dataclass(frozen=True, slots=True)
class ReleaseAsset:
    """An asset already attached to a remote release. Names are unique per release."""

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class RemoteRelease:
    """Snapshot of a release as returned by a provider."""

    id: int
    upload_url: str
    html_url: str
    tag_name: str
    name: str | None
    body: str | None
    target_commitish: str
    draft: bool
    prerelease: bool
    assets: tuple[ReleaseAsset, ...] = ()

    def asset_named(self, name: str) -> ReleaseAsset | None:
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None


@dataclass(frozen=True, slots=True)
class ReleaseFields:
    """Payload for a create or update call.

    ``None`` values are omitted from the request body.
    """

    tag_name: str
    name: str
    body: str | None = None
    draft: bool | None = None
    prerelease: bool | None = None
    target_commitish: str | None = None
    discussion_category_name: str | None = None
    generate_release_notes: bool | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "tag_name": self.tag_name,
            "name": self.name,
            "body": self.body,
            "draft": self.draft,
            "prerelease": self.prerelease,
            "target_commitish": self.target_commitish,
            "discussion_category_name": self.discussion_category_name,
            "generate_release_notes": self.generate_release_notes,
        }
        return {k: v for k, v in payload.items() if v is not None}


@dataclass(frozen=True, slots=True)
class LocalAsset:
    """A local file ready for upload. Built fresh for every upload attempt."""

    name: str
    mime: str
    size: int
    data: bytes


@dataclass(frozen=True, slots=True)
class AssetDescriptor:
    """Provider record for an uploaded asset."""

    id: int
    name: str
    size: int
    content_type: str
    browser_download_url: str

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "content_type": self.content_type,
            "browser_download_url": self.browser_download_url,
        }
