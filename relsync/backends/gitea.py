"""Gitea (and Forgejo) REST backend.

The API lives under ``{server_url}/api/v1``. Gitea has no separate upload
host: attachments are posted as multipart form data to the release's API
url plus ``/assets``. Gitea ignores discussion categories and generated
notes, and requires concrete draft/prerelease booleans.
"""

from __future__ import annotations

from collections.abc import Iterator
from urllib.parse import quote, urlencode
from uuid import uuid4

from relsync.backends.base import (
    JSON_HEADERS,
    json_body,
    parse_asset_descriptor,
    parse_release,
    parse_release_list,
    release_error,
)
from relsync.backends.http import HttpClient
from relsync.core.config import DEFAULT_GITEA_URL
from relsync.core.result import Err, Ok, Result
from relsync.release.backend import PAGE_SIZE, ReleasePage, iter_pages
from relsync.release.errors import ReleaseError
from relsync.release.model import AssetDescriptor, LocalAsset, ReleaseFields, RemoteRelease

__all__ = ["GiteaBackend", "encode_multipart"]

ASSETS_SUFFIX = "/assets"


def encode_multipart(field: str, asset: LocalAsset) -> tuple[bytes, str]:
    """Encode one file field as ``multipart/form-data``.

    Returns:
        (body, content type header value including the boundary)
    """
    boundary = f"relsync-{uuid4().hex}"
    filename = asset.name.replace('"', "%22")
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field}"; filename="{filename}"\r\n'
        f"Content-Type: {asset.mime}\r\n"
        "\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + asset.data + tail, f"multipart/form-data; boundary={boundary}"


def _payload(fields: ReleaseFields) -> dict[str, object]:
    payload: dict[str, object] = {
        "tag_name": fields.tag_name,
        "name": fields.name,
        "body": fields.body,
        "draft": bool(fields.draft),
        "prerelease": bool(fields.prerelease),
        "target_commitish": fields.target_commitish,
    }
    return {k: v for k, v in payload.items() if v is not None}


class GiteaBackend:
    """``ReleaseBackend`` for a Gitea server."""

    def __init__(self, *, http: HttpClient, token: str, server_url: str = DEFAULT_GITEA_URL) -> None:
        self._http = http
        self._token = token
        self._api_url = f"{server_url.rstrip('/')}/api/v1"

    def _headers(self) -> dict[str, str]:
        return {**JSON_HEADERS, "Authorization": f"token {self._token}"}

    def _releases_url(self, owner: str, repo: str) -> str:
        return f"{self._api_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/releases"

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Result[RemoteRelease, ReleaseError]:
        action = f"get release by tag {tag}"
        url = f"{self._releases_url(owner, repo)}/tags/{quote(tag, safe='')}"
        result = self._http.request("GET", url, headers=self._headers())
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release(result.value, action, upload_url_suffix=ASSETS_SUFFIX)

    def _list_page(self, owner: str, repo: str, page: int) -> ReleasePage:
        action = f"list releases (page {page})"
        query = urlencode({"limit": PAGE_SIZE, "page": page})
        result = self._http.request("GET", f"{self._releases_url(owner, repo)}?{query}", headers=self._headers())
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release_list(result.value, action, upload_url_suffix=ASSETS_SUFFIX)

    def list_releases(self, owner: str, repo: str) -> Iterator[ReleasePage]:
        return iter_pages(lambda page: self._list_page(owner, repo, page))

    def create_release(self, owner: str, repo: str, fields: ReleaseFields) -> Result[RemoteRelease, ReleaseError]:
        action = f"create release {fields.tag_name}"
        result = self._http.request(
            "POST",
            self._releases_url(owner, repo),
            headers=self._headers(),
            body=json_body(_payload(fields)),
        )
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release(result.value, action, upload_url_suffix=ASSETS_SUFFIX)

    def update_release(
        self, owner: str, repo: str, release_id: int, fields: ReleaseFields
    ) -> Result[RemoteRelease, ReleaseError]:
        action = f"update release {release_id}"
        result = self._http.request(
            "PATCH",
            f"{self._releases_url(owner, repo)}/{release_id}",
            headers=self._headers(),
            body=json_body(_payload(fields)),
        )
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release(result.value, action, upload_url_suffix=ASSETS_SUFFIX)

    def delete_asset(self, owner: str, repo: str, release_id: int, asset_id: int) -> Result[None, ReleaseError]:
        action = f"delete asset {asset_id}"
        url = f"{self._releases_url(owner, repo)}/{release_id}/assets/{asset_id}"
        result = self._http.request("DELETE", url, headers=self._headers())
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return Ok(None)

    def upload_asset(self, upload_url: str, asset: LocalAsset) -> Result[AssetDescriptor, ReleaseError]:
        body, content_type = encode_multipart("attachment", asset)
        result = self._http.request(
            "POST",
            f"{upload_url}?{urlencode({'name': asset.name})}",
            headers={
                "Accept": "application/json",
                "Authorization": f"token {self._token}",
                "Content-Type": content_type,
            },
            body=body,
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="upload_failed",
                    message=result.error.message,
                    status=result.error.status,
                    hint=f"asset {asset.name}",
                )
            )
        return parse_asset_descriptor(result.value, f"upload asset {asset.name}")
