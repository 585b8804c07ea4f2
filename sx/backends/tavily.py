"""Tavily Search API adapter."""

from __future__ import annotations

from typing import Any, Literal

from sx.backends.base import SearchBackend
from sx.backends.models import SearchOptions, SearchResult

DEFAULT_TAVILY_URL = "https://api.tavily.com/search"

# basic costs one credit per call, advanced two.
SearchDepth = Literal["basic", "advanced"]
SEARCH_DEPTHS: tuple[SearchDepth, ...] = ("basic", "advanced")


class TavilyBackend(SearchBackend):
    """Search with the Tavily API and normalize results."""

    name = "tavily"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "",
        timeout: float = 15.0,
        search_depth: str = "basic",
        include_raw_content: bool = False,
        include_answer: bool = False,
    ):
        super().__init__(timeout=timeout or 15.0)
        self.api_key = api_key
        self.base_url = base_url or DEFAULT_TAVILY_URL
        self.search_depth = search_depth if search_depth in SEARCH_DEPTHS else "basic"
        self.include_raw_content = include_raw_content
        self.include_answer = include_answer

    def is_available(self) -> bool:
        return bool(self.api_key)

    def build_body(self, options: SearchOptions) -> dict[str, Any]:
        query = options.query
        if options.site:
            query = f"site:{options.site} {query}"

        body: dict[str, Any] = {
            "query": query,
            "search_depth": self.search_depth,
            "max_results": self._clamp_count(options.num_results),
        }
        if self.include_raw_content:
            body["include_raw_content"] = True
        if self.include_answer:
            body["include_answer"] = True
        return body

    def search(self, options: SearchOptions) -> list[SearchResult]:
        self._ensure_available("Tavily API key not configured")

        payload = self._send(
            "POST",
            self.base_url,
            json=self.build_body(options),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
        )

        items = payload.get("results", [])
        if not isinstance(items, list):
            raise self._error("invalid-response", "results must be an array")

        results: list[SearchResult] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            content = item.get("content", "") or ""
            if self.include_raw_content and item.get("raw_content"):
                content = item["raw_content"]
            results.append(
                SearchResult(
                    title=item.get("title") or "",
                    url=item.get("url") or "",
                    content=content,
                    engine=self.name,
                    engines=[self.name],
                )
            )
        return results
