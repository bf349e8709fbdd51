"""HTTP client abstraction for provider backends.

This module provides:
- HttpClient: Protocol for HTTP requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Scripted implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from threading import Lock
from typing import Protocol, runtime_checkable

from relsync import __version__
from relsync.core.result import Err, Ok, Result
from relsync.core.structured import as_str_dict, get_raw_str

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "RealHttpClient",
    "MockHttpClient",
    "RecordedRequest",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Provider message when the body carried one, else the reason
        headers: Response headers, lower-cased
    """

    url: str
    status: int
    message: str
    headers: Mapping[str, str] = field(default_factory=lambda: {})

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """A successful (2xx) response."""

    url: str
    status: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=lambda: {})

    def json(self) -> Result[object, HttpError]:
        if not self.body:
            return Ok(None)
        try:
            return Ok(json.loads(self.body.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=self.url, status=self.status, message=f"JSON parse error: {e}"))


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP requests.

    Non-2xx responses come back as ``Err(HttpError)`` with the status set.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]: ...


def _error_message(raw: bytes, fallback: str) -> str:
    """Pull ``message`` out of a JSON error body; providers put it there."""
    try:
        data = as_str_dict(json.loads(raw.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback
    if data is None:
        return fallback
    return get_raw_str(data, "message") or fallback


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = 60.0, user_agent: str = f"relsync/{__version__}") -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        try:
            req = urllib.request.Request(url, data=body, headers=all_headers, method=method)
            with urllib.request.urlopen(req, timeout=self.timeout, context=self._ssl_context) as response:
                return Ok(
                    HttpResponse(
                        url=url,
                        status=response.status,
                        body=response.read(),
                        headers={k.lower(): v for k, v in response.headers.items()},
                    )
                )
        except urllib.error.HTTPError as e:
            raw = e.read() if e.fp is not None else b""
            return Err(
                HttpError(
                    url=url,
                    status=e.code,
                    message=_error_message(raw, str(e.reason)),
                    headers={k.lower(): v for k, v in (e.headers or {}).items()},
                )
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    method: str
    url: str
    headers: Mapping[str, str]
    body: bytes | None

    def json(self) -> object:
        return json.loads(self.body or b"null")


class MockHttpClient:
    """Scripted HTTP client for testing.

    Responses are queued per (method, url) and consumed in order; the last
    one is reused once the queue is drained. Unknown requests get a 404.

    Usage:
        http = MockHttpClient()
        http.add_json("GET", "https://api.example.com/x", {"id": 1})
        result = http.request("GET", "https://api.example.com/x")
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], list[HttpResponse | HttpError]] = {}
        self._lock = Lock()
        self.requests: list[RecordedRequest] = []

    def add(self, method: str, url: str, response: HttpResponse | HttpError) -> None:
        self._responses.setdefault((method.upper(), url), []).append(response)

    def add_json(self, method: str, url: str, data: object, *, status: int = 200) -> None:
        self.add(method, url, HttpResponse(url=url, status=status, body=json.dumps(data).encode("utf-8")))

    def add_error(
        self,
        method: str,
        url: str,
        status: int,
        message: str = "error (mock)",
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.add(method, url, HttpError(url=url, status=status, message=message, headers=dict(headers or {})))

    def calls(self, method: str | None = None) -> list[tuple[str, str]]:
        return [(r.method, r.url) for r in self.requests if method is None or r.method == method]

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Result[HttpResponse, HttpError]:
        key = (method.upper(), url)
        with self._lock:
            self.requests.append(RecordedRequest(method.upper(), url, dict(headers or {}), body))
            queue = self._responses.get(key)
            if not queue:
                return Err(HttpError(url=url, status=404, message="Not Found (mock)"))
            response = queue.pop(0) if len(queue) > 1 else queue[0]

        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
