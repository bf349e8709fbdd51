"""GitHub REST backend.

Release endpoints live under ``{api_url}/repos/{owner}/{repo}/releases``;
asset uploads go to the per-release ``upload_url`` (``uploads.github.com``).
A 429, or a 403 with an exhausted request quota, is retried once after the
advertised delay. Other 403s carrying ``retry-after`` (abuse limits) are
reported and not retried.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from time import sleep, time
from urllib.parse import quote, urlencode

from relsync.backends.base import (
    JSON_HEADERS,
    json_body,
    parse_asset_descriptor,
    parse_release,
    parse_release_list,
    release_error,
)
from relsync.backends.http import HttpClient, HttpError, HttpResponse
from relsync.core.config import DEFAULT_GITHUB_API_URL
from relsync.core.result import Err, Ok, Result
from relsync.output.console import ConsoleProtocol
from relsync.release.backend import PAGE_SIZE, ReleasePage, iter_pages
from relsync.release.errors import ReleaseError
from relsync.release.model import AssetDescriptor, LocalAsset, ReleaseFields, RemoteRelease

__all__ = ["GitHubBackend", "strip_upload_template"]

API_VERSION = "2022-11-28"
MAX_RATE_LIMIT_WAIT_SECONDS = 60.0


def strip_upload_template(upload_url: str) -> str:
    """Drop the RFC 6570 ``{?name,label}`` suffix GitHub appends to upload URLs."""
    index = upload_url.find("{")
    return upload_url if index < 0 else upload_url[:index]


def _is_primary_rate_limit(error: HttpError) -> bool:
    if error.status == 429:
        return True
    return error.status == 403 and error.header("x-ratelimit-remaining") == "0"


def _is_secondary_rate_limit(error: HttpError) -> bool:
    return error.status == 403 and error.header("retry-after") is not None


def _rate_limit_delay(error: HttpError) -> float:
    retry_after = error.header("retry-after")
    if retry_after is not None and retry_after.isdigit():
        return min(float(retry_after), MAX_RATE_LIMIT_WAIT_SECONDS)
    reset = error.header("x-ratelimit-reset")
    if reset is not None and reset.isdigit():
        return min(max(float(reset) - time(), 0.0), MAX_RATE_LIMIT_WAIT_SECONDS)
    return 0.0


class GitHubBackend:
    """``ReleaseBackend`` for github.com and GitHub Enterprise Server."""

    def __init__(
        self,
        *,
        http: HttpClient,
        token: str,
        console: ConsoleProtocol,
        api_url: str = DEFAULT_GITHUB_API_URL,
    ) -> None:
        self._http = http
        self._token = token
        self._console = console
        self._api_url = api_url.rstrip("/")

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {
            **JSON_HEADERS,
            "Accept": "application/vnd.github+json",
            "Authorization": f"token {self._token}",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if extra:
            headers.update(extra)
        return headers

    def _send(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        request_headers = self._headers(headers)
        result = self._http.request(method, url, headers=request_headers, body=body)
        if isinstance(result, Ok):
            return result

        error = result.error
        if _is_primary_rate_limit(error):
            delay = _rate_limit_delay(error)
            self._console.warning(f"Request quota exhausted for request {method} {url}")
            self._console.info(f"Retrying after {delay:.0f} seconds!")
            sleep(delay)
            return self._http.request(method, url, headers=request_headers, body=body)
        if _is_secondary_rate_limit(error):
            self._console.warning(f"Abuse detected for request {method} {url}")
        return result

    def _releases_url(self, owner: str, repo: str) -> str:
        return f"{self._api_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/releases"

    def get_release_by_tag(self, owner: str, repo: str, tag: str) -> Result[RemoteRelease, ReleaseError]:
        action = f"get release by tag {tag}"
        url = f"{self._releases_url(owner, repo)}/tags/{quote(tag, safe='')}"
        result = self._send("GET", url)
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release(result.value, action)

    def _list_page(self, owner: str, repo: str, page: int) -> ReleasePage:
        action = f"list releases (page {page})"
        query = urlencode({"per_page": PAGE_SIZE, "page": page})
        result = self._send("GET", f"{self._releases_url(owner, repo)}?{query}")
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release_list(result.value, action)

    def list_releases(self, owner: str, repo: str) -> Iterator[ReleasePage]:
        return iter_pages(lambda page: self._list_page(owner, repo, page))

    def create_release(self, owner: str, repo: str, fields: ReleaseFields) -> Result[RemoteRelease, ReleaseError]:
        action = f"create release {fields.tag_name}"
        result = self._send("POST", self._releases_url(owner, repo), body=json_body(fields.to_payload()))
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release(result.value, action)

    def update_release(
        self, owner: str, repo: str, release_id: int, fields: ReleaseFields
    ) -> Result[RemoteRelease, ReleaseError]:
        action = f"update release {release_id}"
        url = f"{self._releases_url(owner, repo)}/{release_id}"
        result = self._send("PATCH", url, body=json_body(fields.to_payload()))
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return parse_release(result.value, action)

    def delete_asset(self, owner: str, repo: str, release_id: int, asset_id: int) -> Result[None, ReleaseError]:
        # Asset ids are repository-wide on GitHub; the release id is not part of the path.
        del release_id
        action = f"delete asset {asset_id}"
        result = self._send("DELETE", f"{self._releases_url(owner, repo)}/assets/{asset_id}")
        if isinstance(result, Err):
            return Err(release_error(result.error, action))
        return Ok(None)

    def upload_asset(self, upload_url: str, asset: LocalAsset) -> Result[AssetDescriptor, ReleaseError]:
        url = f"{strip_upload_template(upload_url)}?{urlencode({'name': asset.name})}"
        result = self._send(
            "POST",
            url,
            body=asset.data,
            headers={"Content-Type": asset.mime, "Content-Length": str(asset.size)},
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
        if result.value.status != 201:
            return Err(
                ReleaseError(
                    kind="upload_failed",
                    message=f"unexpected upload response for {asset.name}",
                    status=result.value.status,
                    hint=f"asset {asset.name}",
                )
            )
        return parse_asset_descriptor(result.value, f"upload asset {asset.name}")
