import pytest

from sx.backends.base import BackendError, SearchBackend
from sx.backends.manager import AllBackendsFailedError, BackendManager
from sx.backends.models import SearchOptions, SearchResult
from sx.session import SearchSession


class PagedBackend(SearchBackend):
    """Serves a fixed number of results per page for a limited number of pages."""

    def __init__(self, name: str = "paged", *, per_page: int = 5, pages: int = 3):
        super().__init__()
        self.name = name
        self.per_page = per_page
        self.pages = pages
        self.requests: list[SearchOptions] = []

    def is_available(self) -> bool:
        return True

    def search(self, options: SearchOptions) -> list[SearchResult]:
        self.requests.append(
            SearchOptions(
                query=options.query,
                time_range=options.time_range,
                site=options.site,
                page_no=options.page_no,
            )
        )
        if options.page_no > self.pages:
            return []
        return [
            SearchResult(title=f"{options.query} {options.page_no}.{i}", url=f"https://r/{options.page_no}/{i}")
            for i in range(self.per_page)
        ]


class FailingBackend(SearchBackend):
    name = "failing"

    def is_available(self) -> bool:
        return True

    def search(self, options: SearchOptions) -> list[SearchResult]:
        raise BackendError(self.name, "down")


def _manager(backend: SearchBackend) -> BackendManager:
    manager = BackendManager()
    manager.register(backend)
    manager.set_primary(backend.name)
    return manager


def test_single_page_fills_window_without_second_fetch() -> None:
    backend = PagedBackend(per_page=5)
    session = SearchSession(_manager(backend), SearchOptions(query="golang"), result_count=5)

    fetches = session.ensure_results(0, 5)

    assert fetches == 1
    assert len(session.results) == 5
    assert session.page_no == 2
    assert len(backend.requests) == 1
    assert session.used_backend == "paged"


def test_growth_fetches_until_window_is_covered() -> None:
    backend = PagedBackend(per_page=3)
    session = SearchSession(_manager(backend), SearchOptions(query="q"), result_count=4)

    session.ensure_results(4, 4)

    assert len(session.results) == 9
    assert [r.page_no for r in backend.requests] == [1, 2, 3]
    assert session.page_no == 4


def test_empty_page_stops_growth_for_good() -> None:
    backend = PagedBackend(per_page=2, pages=1)
    session = SearchSession(_manager(backend), SearchOptions(query="q"), result_count=10)

    session.ensure_results()
    assert len(session.results) == 2
    assert session.exhausted is True
    assert len(backend.requests) == 2

    assert session.ensure_results(0, 50) == 0
    assert len(backend.requests) == 2


def test_zero_count_fetches_exactly_one_page() -> None:
    backend = PagedBackend(per_page=4)
    session = SearchSession(_manager(backend), SearchOptions(query="q"), result_count=0)

    assert session.ensure_results() == 1
    assert session.ensure_results() == 0
    assert len(session.results) == 4
    assert session.window() == session.results


def test_query_change_resets_buffer_and_cursor() -> None:
    backend = PagedBackend(per_page=5)
    session = SearchSession(_manager(backend), SearchOptions(query="old"), result_count=5)
    session.ensure_results()
    session.next_page()

    session.set_query("new")

    assert session.results == []
    assert session.page_no == 1
    assert session.start_at == 0
    session.ensure_results()
    assert all(r.title.startswith("new") for r in session.results)


def test_time_range_change_validates_before_reset() -> None:
    backend = PagedBackend(per_page=5)
    session = SearchSession(_manager(backend), SearchOptions(query="q"), result_count=5)
    session.ensure_results()

    with pytest.raises(ValueError, match="Invalid time range 'week2'"):
        session.set_time_range("week2")
    assert len(session.results) == 5
    assert session.page_no == 2

    session.set_time_range("w")
    assert session.results == []
    assert session.options.time_range == "week"
    session.ensure_results()
    assert backend.requests[-1].time_range == "week"
    assert backend.requests[-1].page_no == 1


def test_site_change_resets_and_clears_exhaustion() -> None:
    backend = PagedBackend(per_page=1, pages=1)
    session = SearchSession(_manager(backend), SearchOptions(query="q"), result_count=5)
    session.ensure_results()
    assert session.exhausted is True

    session.set_site(" python.org ")

    assert session.exhausted is False
    assert session.options.site == "python.org"
    session.ensure_results()
    assert backend.requests[-2].site == "python.org"


def test_navigation_offsets() -> None:
    session = SearchSession(_manager(PagedBackend()), SearchOptions(query="q"), result_count=5)
    session.ensure_results()

    session.next_page()
    assert session.start_at == 5
    assert session.needs_fetch() is True
    session.previous_page()
    session.previous_page()
    assert session.start_at == 0
    session.next_page()
    session.first_page()
    assert session.start_at == 0
    assert len(session.window()) == 5


def test_dispatcher_error_propagates() -> None:
    session = SearchSession(_manager(FailingBackend()), SearchOptions(query="q"), result_count=5)

    with pytest.raises(AllBackendsFailedError):
        session.ensure_results()
    assert session.results == []
    assert session.page_no == 1


def test_explicit_backend_uses_search_explicit() -> None:
    manager = BackendManager()
    manager.register(FailingBackend())
    pinned = PagedBackend("pinned", per_page=2)
    manager.register(pinned)
    manager.set_primary("failing")

    session = SearchSession(manager, SearchOptions(query="q"), result_count=2, explicit_backend="pinned")
    session.ensure_results()

    assert session.used_backend == "pinned"
    assert len(session.results) == 2


def test_session_normalizes_options_once() -> None:
    backend = PagedBackend()
    session = SearchSession(
        _manager(backend),
        SearchOptions(query="q", categories=["social-media"], time_range="d"),
        result_count=7,
    )

    assert session.options.categories == ["social media"]
    assert session.options.time_range == "day"
    assert session.options.num_results == 7
