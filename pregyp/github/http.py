"""HTTP client abstraction for the GitHub REST API.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import http.client
import json
import ssl
import threading
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from pregyp import __version__
from pregyp.core.result import Err, Ok, Result
from pregyp.core.structured import as_str_dict, get_str

__all__ = [
    "HttpCall",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

USER_AGENT = f"pregyp-github/{__version__}"


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the HTTP operations the releases API needs.

    Responses are decoded JSON (``None`` for empty bodies) and left untyped;
    callers narrow them with ``pregyp.core.structured``.
    """

    def get_json(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        """GET ``url`` and decode the JSON response."""
        ...

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        """POST ``payload`` as JSON and decode the JSON response."""
        ...

    def post_bytes(
        self,
        url: str,
        data: bytes,
        *,
        content_type: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        """POST raw ``data`` with the given content type.

        ``Content-Length`` is always ``len(data)``.
        """
        ...


def _decode_json(url: str, body: bytes) -> Result[object, HttpError]:
    if not body:
        return Ok(None)
    try:
        return Ok(json.loads(body.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))


def _error_message(error: urllib.error.HTTPError) -> str:
    """Prefer GitHub's JSON ``message`` over the bare reason phrase."""
    try:
        body = error.read()
    except OSError:
        body = b""
    if body:
        try:
            data = as_str_dict(json.loads(body.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError):
            data = None
        if data is not None:
            message = get_str(data, "message")
            if message:
                return message
    return str(error.reason)


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - JSON encoding/decoding
    - Separate timeouts for API calls and binary uploads
    """

    def __init__(
        self,
        timeout: float = 30.0,
        upload_timeout: float = 300.0,
        user_agent: str = USER_AGENT,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds for JSON calls
            upload_timeout: Request timeout in seconds for ``post_bytes``
            user_agent: User-Agent header value
        """
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self.user_agent = user_agent
        # Use system certificates
        self._ssl_context = ssl.create_default_context()

    def _request(
        self,
        method: str,
        url: str,
        *,
        data: bytes | None,
        headers: Mapping[str, str],
        timeout: float,
    ) -> Result[bytes, HttpError]:
        all_headers = {"User-Agent": self.user_agent, **headers}
        try:
            req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=_error_message(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except http.client.HTTPException as e:
            # IncompleteRead, BadStatusLine and friends are not OSErrors.
            return Err(HttpError(url=url, status=0, message=str(e) or type(e).__name__))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

    def get_json(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        result = self._request("GET", url, data=None, headers=headers or {}, timeout=self.timeout)
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value)

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        body = json.dumps(dict(payload)).encode("utf-8")
        all_headers = {**(headers or {}), "Content-Type": "application/json"}
        result = self._request("POST", url, data=body, headers=all_headers, timeout=self.timeout)
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value)

    def post_bytes(
        self,
        url: str,
        data: bytes,
        *,
        content_type: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        all_headers = {
            **(headers or {}),
            "Content-Type": content_type,
            "Content-Length": str(len(data)),
        }
        result = self._request(
            "POST", url, data=data, headers=all_headers, timeout=self.upload_timeout
        )
        if isinstance(result, Err):
            return result
        return _decode_json(url, result.value)


@dataclass(frozen=True, slots=True)
class HttpCall:
    """A request recorded by MockHttpClient."""

    method: str
    url: str
    headers: dict[str, str]
    body: object = None


def _empty_calls() -> list[HttpCall]:
    return []


@dataclass
class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url). Unknown requests get a 404.
    Calls are recorded in order and may come from several threads.

    Usage:
        client = MockHttpClient()
        client.set_response("GET", "https://api.github.com/repos/a/b/releases", [])
        result = client.get_json("https://api.github.com/repos/a/b/releases")
        assert result == Ok([])
    """

    calls: list[HttpCall] = field(default_factory=_empty_calls)
    _responses: dict[tuple[str, str], object] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def set_response(self, method: str, url: str, response: object) -> None:
        """Set the response for a request; pass an HttpError to fail it."""
        self._responses[(method.upper(), url)] = response

    def _respond(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
        body: object,
    ) -> Result[object, HttpError]:
        with self._lock:
            self.calls.append(HttpCall(method, url, dict(headers or {}), body))

        key = (method, url)
        if key not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not Found (mock)"))

        response = self._responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_json(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        return self._respond("GET", url, headers, None)

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        *,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        return self._respond("POST", url, headers, dict(payload))

    def post_bytes(
        self,
        url: str,
        data: bytes,
        *,
        content_type: str,
        headers: Mapping[str, str] | None = None,
    ) -> Result[object, HttpError]:
        all_headers = {
            **(headers or {}),
            "Content-Type": content_type,
            "Content-Length": str(len(data)),
        }
        return self._respond("POST", url, all_headers, data)

    # Test helper methods

    def calls_for(self, method: str, url_prefix: str = "") -> list[HttpCall]:
        """Recorded calls with ``method`` whose URL starts with ``url_prefix``."""
        return [c for c in self.calls if c.method == method and c.url.startswith(url_prefix)]
