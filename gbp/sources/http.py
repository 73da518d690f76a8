"""HTTP access for the GitHub release source.

``HttpClient`` is the seam the source depends on; ``RealHttpClient`` talks
to GitHub over urllib and ``MockHttpClient`` answers from a URL table.
"""

from __future__ import annotations

import http.client
import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from email.message import Message
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse

from gbp import __version__
from gbp.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

HTTP_TIMEOUT_SECONDS = 30.0
GITHUB_JSON = "application/vnd.github+json"

# Hosts that receive the token; raw file downloads need it for private repos.
_TOKEN_HOSTS = frozenset({"api.github.com", "raw.githubusercontent.com"})


@dataclass(frozen=True, slots=True)
class HttpError:
    """A failed GET.

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
    def get_json(self, url: str) -> Result[object, HttpError]:
        """GET ``url`` and decode the body as JSON (object or array)."""
        ...

    def get_text(self, url: str) -> Result[str, HttpError]: ...


def _status_message(url: str, code: int, reason: str, headers: Message) -> HttpError:
    if code in (403, 429) and headers.get("X-RateLimit-Remaining") == "0":
        reset = headers.get("X-RateLimit-Reset", "?")
        return HttpError(url=url, status=code, message=f"rate limit exceeded (resets at {reset})")
    return HttpError(url=url, status=code, message=reason)


class RealHttpClient:
    """urllib client with system certificates, a timeout and optional token.

    Args:
        timeout: Seconds per request
        user_agent: User-Agent header (GitHub rejects requests without one)
        token: GitHub token sent to GitHub hosts only; raises the API rate limit
    """

    def __init__(
        self,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        user_agent: str = f"gbp/{__version__}",
        token: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._token = token or None
        self._ssl_context = ssl.create_default_context()

    def headers_for(self, url: str, accept: str) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent, "Accept": accept}
        if self._token and urlparse(url).hostname in _TOKEN_HOSTS:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def get_json(self, url: str) -> Result[object, HttpError]:
        match self._fetch(url, GITHUB_JSON):
            case Err(error):
                return Err(error)
            case Ok(body):
                try:
                    return Ok(json.loads(body.decode("utf-8")))
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))

    def get_text(self, url: str) -> Result[str, HttpError]:
        match self._fetch(url, "text/plain"):
            case Err(error):
                return Err(error)
            case Ok(body):
                try:
                    return Ok(body.decode("utf-8"))
                except UnicodeDecodeError as e:
                    return Err(HttpError(url=url, status=0, message=f"Decode error: {e}"))

    def _fetch(self, url: str, accept: str) -> Result[bytes, HttpError]:
        try:
            request = urllib.request.Request(url, headers=self.headers_for(url, accept))
            with urllib.request.urlopen(
                request, timeout=self.timeout, context=self._ssl_context
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(_status_message(url, e.code, str(e.reason), e.headers))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except http.client.HTTPException as e:
            # Truncated bodies and malformed status lines.
            return Err(HttpError(url=url, status=0, message=f"{type(e).__name__}: {e}"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


class MockHttpClient:
    """Answers GETs from a URL table; anything unregistered is a 404.

    Usage:
        client = MockHttpClient()
        client.set_json(f"{api}/repos/o/r/releases/latest", {"tag_name": "v1.0.0"})
        client.set_text(f"{raw}/o/r/develop/go.mod", "module x\\n\\ngo 1.22\\n")
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], object] = {}
        self.calls: list[tuple[str, str]] = []

    def set_json(self, url: str, response: object) -> None:
        """Register a decoded JSON body, or an HttpError to fail with."""
        self._responses[("get_json", url)] = response

    def set_text(self, url: str, response: str | HttpError) -> None:
        self._responses[("get_text", url)] = response

    def get_json(self, url: str) -> Result[object, HttpError]:
        return self._answer("get_json", url)

    def get_text(self, url: str) -> Result[str, HttpError]:
        result = self._answer("get_text", url)
        if isinstance(result, Ok) and not isinstance(result.value, str):
            return Err(HttpError(url=url, status=0, message="mock body is not text"))
        return result  # type: ignore[return-value]

    def _answer(self, method: str, url: str) -> Result[object, HttpError]:
        self.calls.append((method, url))
        key = (method, url)
        if key not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._responses[key]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
