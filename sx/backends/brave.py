"""Brave Search API adapter."""

from __future__ import annotations

from sx.backends.base import SearchBackend
from sx.backends.models import SearchOptions, SearchResult

DEFAULT_BRAVE_URL = "https://api.search.brave.com/res/v1/web/search"


class BraveBackend(SearchBackend):
    """Search with the Brave API and normalize results."""

    name = "brave"

    def __init__(self, api_key: str, *, base_url: str = "", timeout: float = 10.0):
        super().__init__(timeout=timeout or 10.0)
        self.api_key = api_key
        self.base_url = base_url or DEFAULT_BRAVE_URL

    def is_available(self) -> bool:
        return bool(self.api_key)

    def search(self, options: SearchOptions) -> list[SearchResult]:
        self._ensure_available("Brave API key not configured")

        count = self._clamp_count(options.num_results)
        params: dict[str, str | int] = {"q": options.query, "count": count}
        if options.page_no > 1:
            params["offset"] = (options.page_no - 1) * count

        if options.safe_search == "none":
            params["safesearch"] = "off"
        elif options.safe_search == "strict":
            params["safesearch"] = "strict"
        else:
            params["safesearch"] = "moderate"

        if options.site:
            params["site"] = options.site

        payload = self._send(
            "GET",
            self.base_url,
            params=params,
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": self.api_key,
            },
        )

        web = payload.get("web") or {}
        items = web.get("results", []) if isinstance(web, dict) else None
        if not isinstance(items, list):
            raise self._error("invalid-response", "web.results must be an array")

        return [
            SearchResult(
                title=item.get("title") or "",
                url=item.get("url") or "",
                content=item.get("description") or "",
                published_date=item.get("age") or "",
                engine=self.name,
                engines=[self.name],
            )
            for item in items
            if isinstance(item, dict)
        ]
