"""Payload parsing and error mapping shared by provider backends."""

from __future__ import annotations

import json

from relsync.backends.http import HttpError, HttpResponse
from relsync.core.result import Err, Ok, Result
from relsync.core.structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_list,
    get_raw_str,
    get_str,
)
from relsync.release.errors import ReleaseError, ReleaseErrorKind
from relsync.release.model import AssetDescriptor, ReleaseAsset, RemoteRelease

__all__ = [
    "JSON_HEADERS",
    "json_body",
    "parse_asset_descriptor",
    "parse_release",
    "parse_release_list",
    "release_error",
]

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


def json_body(payload: dict[str, object]) -> bytes:
    return json.dumps(payload).encode("utf-8")


def release_error(error: HttpError, action: str) -> ReleaseError:
    """Translate a transport error into the release error taxonomy.

    404 is ``not_found`` and 409/422 (tag already taken) are ``conflict``.
    Everything else, network failures included, is ``request_failed``.
    """
    kind: ReleaseErrorKind
    if error.status == 404:
        kind = "not_found"
    elif error.status in (409, 422):
        kind = "conflict"
    else:
        kind = "request_failed"
    return ReleaseError(kind=kind, message=f"{action}: {error.message}", status=error.status, hint=error.url)


def _invalid(action: str, detail: str, status: int | None = None) -> ReleaseError:
    return ReleaseError(kind="invalid_response", message=f"{action}: {detail}", status=status)


def _parse_assets(data: StrDict) -> tuple[ReleaseAsset, ...]:
    out: list[ReleaseAsset] = []
    for item in get_list(data, "assets"):
        d = as_str_dict(item)
        if d is None:
            continue
        asset_id = get_int(d, "id")
        name = get_raw_str(d, "name")
        if asset_id is None or name is None:
            continue
        out.append(ReleaseAsset(id=asset_id, name=name))
    return tuple(out)


def _release_from_dict(data: StrDict, upload_url: str | None) -> RemoteRelease | None:
    release_id = get_int(data, "id")
    if release_id is None:
        return None
    return RemoteRelease(
        id=release_id,
        upload_url=upload_url if upload_url is not None else get_str(data, "upload_url"),
        html_url=get_str(data, "html_url"),
        tag_name=get_str(data, "tag_name"),
        name=get_raw_str(data, "name"),
        body=get_raw_str(data, "body"),
        target_commitish=get_str(data, "target_commitish"),
        draft=get_bool(data, "draft"),
        prerelease=get_bool(data, "prerelease"),
        assets=_parse_assets(data),
    )


def parse_release(
    response: HttpResponse,
    action: str,
    *,
    upload_url_suffix: str | None = None,
) -> Result[RemoteRelease, ReleaseError]:
    """Parse a single release object.

    Args:
        upload_url_suffix: When set, the upload endpoint is the release's API
            ``url`` plus this suffix instead of the ``upload_url`` field.
    """
    obj = response.json()
    if isinstance(obj, Err):
        return Err(_invalid(action, obj.error.message, response.status))
    data = as_str_dict(obj.value)
    if data is None:
        return Err(_invalid(action, "expected a JSON object", response.status))

    upload_url = None
    if upload_url_suffix is not None:
        upload_url = get_str(data, "url") + upload_url_suffix
    release = _release_from_dict(data, upload_url)
    if release is None:
        return Err(_invalid(action, "release without an id", response.status))
    return Ok(release)


def parse_release_list(
    response: HttpResponse,
    action: str,
    *,
    upload_url_suffix: str | None = None,
) -> Result[list[RemoteRelease], ReleaseError]:
    obj = response.json()
    if isinstance(obj, Err):
        return Err(_invalid(action, obj.error.message, response.status))
    items = as_obj_list(obj.value)
    if items is None:
        return Err(_invalid(action, "expected a JSON array", response.status))

    out: list[RemoteRelease] = []
    for item in items:
        data = as_str_dict(item)
        if data is None:
            continue
        upload_url = None
        if upload_url_suffix is not None:
            upload_url = get_str(data, "url") + upload_url_suffix
        release = _release_from_dict(data, upload_url)
        if release is not None:
            out.append(release)
    return Ok(out)


def parse_asset_descriptor(response: HttpResponse, action: str) -> Result[AssetDescriptor, ReleaseError]:
    obj = response.json()
    if isinstance(obj, Err):
        return Err(_invalid(action, obj.error.message, response.status))
    data = as_str_dict(obj.value)
    if data is None:
        return Err(_invalid(action, "expected a JSON object", response.status))

    asset_id = get_int(data, "id")
    if asset_id is None:
        return Err(_invalid(action, "asset without an id", response.status))
    return Ok(
        AssetDescriptor(
            id=asset_id,
            name=get_str(data, "name"),
            size=get_int(data, "size") or 0,
            content_type=get_str(data, "content_type"),
            browser_download_url=get_str(data, "browser_download_url"),
        )
    )
