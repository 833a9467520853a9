"""HTTP transport for the GitHub REST API.

This module provides:
- HttpClient: Protocol for JSON requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Canned responses keyed by method and URL
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from breezy.core.result import Err, Ok, Result
from breezy.forge.timeouts import API_TIMEOUT_SECONDS

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "RecordedCall",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        method: HTTP method of the failed request
        url: The URL that failed
        status: HTTP status code (0 for network and decoding errors)
        message: Human-readable error message
    """

    method: str
    url: str
    status: int
    message: str

    @property
    def is_transient(self) -> bool:
        """Network failures, rate limiting and server errors may succeed on retry."""
        return self.status == 0 or self.status == 429 or self.status >= 500

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.method} {self.url})"
        return f"{self.message} ({self.method} {self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON-over-HTTP requests."""

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        payload: dict[str, object] | None = None,
    ) -> Result[object, HttpError]:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            url: Absolute URL including any query string
            headers: Request headers
            payload: JSON body, if any

        Returns:
            Ok with the decoded document (None for an empty body), or Err
        """
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(self, timeout: float = API_TIMEOUT_SECONDS) -> None:
        self.timeout = timeout
        self._ssl_context = ssl.create_default_context()

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        payload: dict[str, object] | None,
    ) -> Result[bytes, HttpError]:
        data: bytes | None = None
        send_headers = dict(headers)
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            send_headers["Content-Type"] = "application/json"

        try:
            req = urllib.request.Request(url, data=data, headers=send_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(HttpError(method=method, url=url, status=e.code, message=_error_detail(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(method=method, url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(method=method, url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(method=method, url=url, status=0, message=str(e)))

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        payload: dict[str, object] | None = None,
    ) -> Result[object, HttpError]:
        result = self._send(method, url, headers, payload)
        if isinstance(result, Err):
            return result

        raw = result.value
        if not raw.strip():
            return Ok(None)
        try:
            return Ok(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            message = f"JSON parse error: {e}"
            return Err(HttpError(method=method, url=url, status=0, message=message))


def _error_detail(error: urllib.error.HTTPError) -> str:
    # GitHub puts the useful part of a failure in the JSON body's "message".
    try:
        body: object = json.loads(error.read().decode("utf-8"))
    except (OSError, ValueError):
        return str(error.reason)
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return f"{error.reason}: {message}"
    return str(error.reason)


@dataclass(frozen=True, slots=True)
class RecordedCall:
    method: str
    url: str
    payload: dict[str, object] | None


class MockHttpClient:
    """HTTP client returning predefined responses, for tests.

    A response registered with ``queue`` is consumed once, ahead of the
    sticky response registered with ``set``.

    Usage:
        client = MockHttpClient()
        client.set("GET", "https://api.github.com/user", {"login": "octocat"})
        result = client.request_json("GET", "https://api.github.com/user", headers={})
        assert result == Ok({"login": "octocat"})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], object | HttpError] = {}
        self._queued: dict[tuple[str, str], list[object | HttpError]] = {}
        self.calls: list[RecordedCall] = []
        self.headers: list[dict[str, str]] = []

    def set(self, method: str, url: str, response: object | HttpError) -> None:
        self._responses[(method, url)] = response

    def queue(self, method: str, url: str, response: object | HttpError) -> None:
        self._queued.setdefault((method, url), []).append(response)

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        payload: dict[str, object] | None = None,
    ) -> Result[object, HttpError]:
        self.calls.append(RecordedCall(method=method, url=url, payload=payload))
        self.headers.append(dict(headers))

        key = (method, url)
        pending = self._queued.get(key)
        if pending:
            response = pending.pop(0)
        elif key in self._responses:
            response = self._responses[key]
        else:
            return Err(HttpError(method=method, url=url, status=404, message="Not found (mock)"))

        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def methods(self) -> list[str]:
        """Methods of all recorded calls, in order."""
        return [c.method for c in self.calls]
