"""SearXNG instance adapter."""

from __future__ import annotations

from urllib.parse import urlparse

from sx import __version__
from sx.backends.base import SearchBackend
from sx.backends.models import SearchOptions, SearchResult
from sx.filters import normalize_category

SAFE_SEARCH_VALUES: dict[str, int] = {
    "none": 0,
    "moderate": 1,
    "strict": 2,
}


class SearxngBackend(SearchBackend):
    """Search a SearXNG instance through its JSON API."""

    name = "searxng"

    def __init__(
        self,
        base_url: str,
        *,
        username: str = "",
        password: str = "",
        http_method: str = "GET",
        timeout: float = 30.0,
        no_verify_ssl: bool = False,
        no_user_agent: bool = False,
    ):
        super().__init__(timeout=timeout, verify=not no_verify_ssl)
        self.base_url = (base_url or "").strip().rstrip("/")
        self.username = username
        self.password = password
        self.http_method = (http_method or "GET").strip().upper()
        self.no_user_agent = no_user_agent

    def is_available(self) -> bool:
        if not self.base_url:
            return False
        try:
            parsed = urlparse(self.base_url)
        except ValueError:
            return False
        return bool(parsed.scheme and parsed.netloc)

    def search(self, options: SearchOptions) -> list[SearchResult]:
        self._ensure_available("SearXNG URL not configured")

        query = options.query
        if options.site:
            query = f"site:{options.site} {query}"
        params = self.build_params(query, options)

        headers = {"Accept": "application/json"}
        if not self.no_user_agent:
            headers["User-Agent"] = f"sx/{__version__}"

        kwargs: dict = {"headers": headers}
        if self.username and self.password:
            kwargs["auth"] = (self.username, self.password)

        url = f"{self.base_url}/search"
        if self.http_method == "POST":
            payload = self._send("POST", url, data=params, **kwargs)
        else:
            payload = self._send("GET", url, params=params, **kwargs)

        items = payload.get("results", [])
        if not isinstance(items, list):
            raise self._error("invalid-response", "results must be an array")
        try:
            return [SearchResult.from_dict(item) for item in items]
        except ValueError as e:
            raise self._error("invalid-response", str(e)) from e

    def build_params(self, query: str, options: SearchOptions) -> dict[str, str]:
        """Build request parameters shared by GET and POST transports."""
        params = {"q": query, "format": "json"}

        if options.categories:
            params["categories"] = ",".join(normalize_category(c) for c in options.categories)
        if options.engines:
            params["engines"] = ",".join(options.engines)
        if options.language:
            params["language"] = options.language
        if options.safe_search in SAFE_SEARCH_VALUES:
            params["safesearch"] = str(SAFE_SEARCH_VALUES[options.safe_search])
        if options.time_range:
            params["time_range"] = options.time_range
        if options.page_no > 1:
            params["pageno"] = str(options.page_no)

        return params
