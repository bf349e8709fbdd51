"""Tests for relsync.backends.gitea."""

from __future__ import annotations

import pytest

from relsync.backends.gitea import GiteaBackend, encode_multipart
from relsync.backends.http import HttpResponse, MockHttpClient
from relsync.core.result import Err, Ok
from relsync.release.model import LocalAsset, ReleaseFields

SERVER = "https://git.example.com"
API = f"{SERVER}/api/v1/repos/octo/app/releases"


def _release_json(id: int = 5, tag: str = "v1.0.0", **extra: object) -> dict[str, object]:
    data: dict[str, object] = {
        "id": id,
        "url": f"{API}/{id}",
        "html_url": f"{SERVER}/octo/app/releases/tag/{tag}",
        "tag_name": tag,
        "name": tag,
        "body": "",
        "target_commitish": "main",
        "draft": False,
        "prerelease": False,
        "assets": [{"id": 3, "name": "app.zip", "size": 3, "uuid": "abc"}],
    }
    data.update(extra)
    return data


@pytest.fixture
def http() -> MockHttpClient:
    return MockHttpClient()


@pytest.fixture
def backend(http: MockHttpClient) -> GiteaBackend:
    return GiteaBackend(http=http, token="t0ken", server_url=SERVER + "/")


def test_upload_url_is_release_url_plus_assets(http: MockHttpClient, backend: GiteaBackend) -> None:
    http.add_json("GET", f"{API}/tags/v1.0.0", _release_json())

    result = backend.get_release_by_tag("octo", "app", "v1.0.0")

    assert isinstance(result, Ok)
    assert result.value.upload_url == f"{API}/5/assets"
    assert http.requests[0].headers["Authorization"] == "token t0ken"


def test_list_uses_limit_and_stops_on_empty_page(http: MockHttpClient, backend: GiteaBackend) -> None:
    http.add_json("GET", f"{API}?limit=100&page=1", [_release_json(1, "v0.1", draft=True)])
    http.add_json("GET", f"{API}?limit=100&page=2", [])

    pages = list(backend.list_releases("octo", "app"))

    assert len(pages) == 2
    first = pages[0]
    assert isinstance(first, Ok)
    assert first.value[0].draft is True


def test_create_coerces_flags(http: MockHttpClient, backend: GiteaBackend) -> None:
    http.add_json("POST", API, _release_json(), status=201)

    fields = ReleaseFields(
        tag_name="v1.0.0",
        name="v1.0.0",
        discussion_category_name="General",
        generate_release_notes=True,
    )
    result = backend.create_release("octo", "app", fields)

    assert isinstance(result, Ok)
    assert http.requests[0].json() == {
        "tag_name": "v1.0.0",
        "name": "v1.0.0",
        "draft": False,
        "prerelease": False,
    }


def test_update_and_delete_paths(http: MockHttpClient, backend: GiteaBackend) -> None:
    http.add_json("PATCH", f"{API}/5", _release_json(body="notes"))
    http.add("DELETE", f"{API}/5/assets/3", HttpResponse(url=f"{API}/5/assets/3", status=204))

    updated = backend.update_release("octo", "app", 5, ReleaseFields(tag_name="v1.0.0", name="n", body="notes"))
    deleted = backend.delete_asset("octo", "app", 5, 3)

    assert isinstance(updated, Ok)
    assert updated.value.body == "notes"
    assert deleted == Ok(None)


def test_upload_is_multipart(http: MockHttpClient, backend: GiteaBackend) -> None:
    url = f"{API}/5/assets?name=app.zip"
    http.add_json(
        "POST",
        url,
        {"id": 11, "name": "app.zip", "size": 3, "browser_download_url": f"{SERVER}/attachments/abc"},
        status=201,
    )
    asset = LocalAsset(name="app.zip", mime="application/zip", size=3, data=b"zip")

    result = backend.upload_asset(f"{API}/5/assets", asset)

    assert isinstance(result, Ok)
    assert result.value.id == 11
    request = http.requests[0]
    assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert request.body is not None
    assert b'name="attachment"; filename="app.zip"' in request.body
    assert b"\r\n\r\nzip\r\n" in request.body


def test_upload_error(http: MockHttpClient, backend: GiteaBackend) -> None:
    http.add_error("POST", f"{API}/5/assets?name=app.zip", 413, "Request Entity Too Large")
    asset = LocalAsset(name="app.zip", mime="application/zip", size=3, data=b"zip")

    result = backend.upload_asset(f"{API}/5/assets", asset)

    assert isinstance(result, Err)
    assert result.error.kind == "upload_failed"
    assert result.error.status == 413
    assert result.error.message == "Request Entity Too Large"


def test_encode_multipart_boundary_matches_header() -> None:
    body, content_type = encode_multipart("attachment", LocalAsset("a.txt", "text/plain", 2, b"hi"))
    boundary = content_type.split("boundary=", 1)[1]
    assert body.startswith(f"--{boundary}\r\n".encode())
    assert body.endswith(f"\r\n--{boundary}--\r\n".encode())
