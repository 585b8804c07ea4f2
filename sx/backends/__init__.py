"""Search backends and the fallback-aware backend manager."""

from sx.backends.base import BackendError, ErrorKind, SearchBackend, classify_status
from sx.backends.brave import BraveBackend
from sx.backends.manager import (
    AllBackendsFailedError,
    BackendConfigError,
    BackendManager,
    SearchError,
)
from sx.backends.models import SearchOptions, SearchResult
from sx.backends.searxng import SearxngBackend
from sx.backends.tavily import TavilyBackend

__all__ = [
    "AllBackendsFailedError",
    "BackendConfigError",
    "BackendError",
    "BackendManager",
    "BraveBackend",
    "ErrorKind",
    "SearchBackend",
    "SearchError",
    "SearchOptions",
    "SearchResult",
    "SearxngBackend",
    "TavilyBackend",
    "classify_status",
]
