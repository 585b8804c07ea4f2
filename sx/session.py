"""Search session state: running query, pagination cursor and result buffer."""

from __future__ import annotations

from loguru import logger

from sx.backends.manager import BackendManager
from sx.backends.models import SearchOptions, SearchResult
from sx.filters import normalize_time_range


class SearchSession:
    """Accumulates results for one query across provider pages.

    ``options.page_no`` is the next provider page to fetch and ``start_at`` is
    the zero-based display offset into ``results``. The buffer only grows
    until the query, time range or site filter changes.
    """

    def __init__(
        self,
        manager: BackendManager,
        options: SearchOptions,
        *,
        result_count: int = 10,
        explicit_backend: str | None = None,
    ):
        self.manager = manager
        self.options = options.normalized()
        if result_count > 0:
            self.options.num_results = result_count
        self.result_count = max(0, result_count)
        self.explicit_backend = explicit_backend or None
        self.start_at = 0
        self.results: list[SearchResult] = []
        self.used_backend: str | None = None
        self.exhausted = False

    @property
    def query(self) -> str:
        return self.options.query

    @property
    def page_no(self) -> int:
        return self.options.page_no

    def ensure_results(self, start_at: int | None = None, count: int | None = None) -> int:
        """Fetch pages until the buffer covers ``start_at + count`` entries.

        A count of zero fetches exactly one page when nothing is buffered.
        Returns the number of fetches performed.
        """
        offset = self.start_at if start_at is None else start_at
        wanted = self.result_count if count is None else count
        fetches = 0

        if wanted == 0:
            if not self.results and not self.exhausted:
                self._fetch_page()
                fetches += 1
            return fetches

        while len(self.results) < offset + wanted and not self.exhausted:
            self._fetch_page()
            fetches += 1
        return fetches

    def _fetch_page(self) -> None:
        logger.debug("Fetching page {} for {!r}", self.options.page_no, self.options.query)
        if self.explicit_backend:
            results = self.manager.search_explicit(self.explicit_backend, self.options)
            backend = self.explicit_backend
        else:
            results, backend = self.manager.search(self.options)

        if self.used_backend is None:
            self.used_backend = backend

        if not results:
            logger.debug("Backend {} returned no results, stopping pagination", backend)
            self.exhausted = True
            return

        self.results.extend(results)
        self.options.page_no += 1

    def reset(self) -> None:
        """Drop buffered results and rewind the cursor to the first page."""
        self.results = []
        self.options.page_no = 1
        self.start_at = 0
        self.exhausted = False

    def set_query(self, query: str) -> None:
        self.options.query = query
        self.reset()

    def set_time_range(self, time_range: str) -> None:
        """Switch the time range. Invalid values raise ValueError and change nothing."""
        self.options.time_range = normalize_time_range(time_range)
        self.reset()

    def set_site(self, site: str) -> None:
        self.options.site = site.strip()
        self.reset()

    def window(self) -> list[SearchResult]:
        """Results visible at the current display offset."""
        if self.result_count == 0:
            return self.results[self.start_at:]
        return self.results[self.start_at:self.start_at + self.result_count]

    def needs_fetch(self) -> bool:
        return self.start_at >= len(self.results) and not self.exhausted

    def next_page(self) -> None:
        self.start_at += self.result_count

    def previous_page(self) -> None:
        self.start_at = max(0, self.start_at - self.result_count)

    def first_page(self) -> None:
        self.start_at = 0
