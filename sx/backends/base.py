"""Search backend capability and shared HTTP error classification."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal

import httpx
from loguru import logger

from sx.backends.models import SearchOptions, SearchResult

ErrorKind = Literal["unavailable", "network", "auth", "rate-limit", "invalid-response"]

ERROR_KINDS: tuple[ErrorKind, ...] = (
    "unavailable",
    "network",
    "auth",
    "rate-limit",
    "invalid-response",
)

# Longest response body excerpt carried into an error message.
_MAX_BODY_EXCERPT = 200


class BackendError(Exception):
    """Raised when a single backend fails to answer a search."""

    def __init__(
        self,
        backend: str,
        message: str,
        *,
        kind: ErrorKind = "network",
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.backend = backend
        self.message = message
        self.kind: ErrorKind = kind if kind in ERROR_KINDS else "network"
        self.status_code = status_code

    def __str__(self) -> str:
        return f"{self.backend} backend: {self.message}"


def classify_status(status_code: int) -> ErrorKind:
    """Map a non-2xx HTTP status to an error kind."""
    if status_code in (401, 403):
        return "auth"
    if status_code == 429:
        return "rate-limit"
    return "network"


class SearchBackend(ABC):
    """Contract every search provider implements.

    ``search`` performs exactly one round trip and never retries; fallback is
    the manager's job.
    """

    name: str = ""

    def __init__(self, *, timeout: float = 10.0, verify: bool = True):
        self.timeout = timeout
        self.verify = verify

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backend has enough configuration to attempt a call."""

    @abstractmethod
    def search(self, options: SearchOptions) -> list[SearchResult]:
        """Run one search and map the native response to SearchResult items."""

    def _error(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> BackendError:
        return BackendError(self.name, message, kind=kind, status_code=status_code)

    def _ensure_available(self, reason: str) -> None:
        if not self.is_available():
            raise self._error("unavailable", reason)

    def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        """Perform one HTTP request and return the decoded JSON body."""
        logger.debug("{} {} {}", self.name, method, url)
        try:
            with httpx.Client(timeout=self.timeout, verify=self.verify) as client:
                if method == "POST":
                    response = client.post(url, **kwargs)
                else:
                    response = client.get(url, **kwargs)
        except httpx.TimeoutException as e:
            raise self._error("network", f"request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise self._error("network", f"request failed: {e}") from e
        return self._decode(response)

    def _decode(self, response: Any) -> dict[str, Any]:
        status = response.status_code
        if not 200 <= status < 300:
            body = (response.text or "").strip()[:_MAX_BODY_EXCERPT]
            kind = classify_status(status)
            if kind == "auth":
                message = f"authentication failed: {body}"
            elif kind == "rate-limit":
                message = f"rate limited: {body}"
            else:
                message = f"HTTP {status}: {body}"
            raise self._error(kind, message, status_code=status)

        try:
            payload = response.json()
        except ValueError as e:
            raise self._error("invalid-response", f"failed to parse JSON: {e}") from e
        if not isinstance(payload, dict):
            raise self._error("invalid-response", "unexpected response shape")
        return payload

    @staticmethod
    def _clamp_count(count: int, *, maximum: int = 20, default: int = 10) -> int:
        if count <= 0 or count > maximum:
            return default
        return count
