import io
import json
from pathlib import Path

from rich.console import Console

from sx.backends.base import SearchBackend
from sx.backends.manager import BackendManager
from sx.backends.models import SearchOptions, SearchResult
from sx.display import ResultRenderer
from sx.history import SearchHistory
from sx.interactive import InteractiveController
from sx.session import SearchSession


class PagedBackend(SearchBackend):
    name = "paged"

    def __init__(self, per_page: int = 5, pages: int = 2):
        super().__init__()
        self.per_page = per_page
        self.pages = pages
        self.requests: list[dict] = []

    def is_available(self) -> bool:
        return True

    def search(self, options: SearchOptions) -> list[SearchResult]:
        self.requests.append(
            {
                "query": options.query,
                "page_no": options.page_no,
                "time_range": options.time_range,
                "site": options.site,
            }
        )
        if options.page_no > self.pages:
            return []
        start = (options.page_no - 1) * self.per_page
        return [
            SearchResult(
                title=f"{options.query} result {start + i + 1}",
                url=f"https://example.com/{options.query}/{start + i + 1}",
                content="snippet",
                engine=self.name,
            )
            for i in range(self.per_page)
        ]


def _controller(tmp_path: Path, **kwargs):
    backend = PagedBackend(**kwargs)
    manager = BackendManager()
    manager.register(backend)
    manager.set_primary("paged")
    session = SearchSession(manager, SearchOptions(query="golang"), result_count=5)
    session.ensure_results()

    buffer = io.StringIO()
    renderer = ResultRenderer(Console(file=buffer, width=200, force_terminal=False))
    opened: list[str] = []
    debug_calls: list[bool] = []
    controller = InteractiveController(
        session,
        renderer,
        history=SearchHistory(tmp_path / "history"),
        open_url=opened.append,
        on_debug_toggle=debug_calls.append,
    )
    return controller, backend, buffer, opened, debug_calls


def test_quit_terminates_and_stops_reading(tmp_path: Path) -> None:
    controller, backend, _, _, _ = _controller(tmp_path)

    state = controller.run(["q", "n", "n"])

    assert state == "terminated"
    assert controller.session.start_at == 0
    assert len(backend.requests) == 1


def test_quit_aliases(tmp_path: Path) -> None:
    for token in ("quit", "exit", "  q  "):
        controller, _, _, _, _ = _controller(tmp_path)
        assert controller.handle(token) == "terminated"


def test_help_and_empty_line_do_not_change_state(tmp_path: Path) -> None:
    controller, backend, buffer, _, _ = _controller(tmp_path)

    assert controller.handle("?") == "displaying-page"
    assert controller.handle("") == "displaying-page"

    assert "Type 'q', 'quit', or 'exit'" in buffer.getvalue()
    assert len(backend.requests) == 1


def test_next_past_buffer_fetches_more(tmp_path: Path) -> None:
    controller, backend, buffer, _, _ = _controller(tmp_path)

    assert controller.handle("n") == "displaying-page"

    assert controller.session.start_at == 5
    assert len(controller.session.results) == 10
    assert backend.requests[-1]["page_no"] == 2
    assert "golang result 6" in buffer.getvalue()


def test_next_when_no_more_results_stays_on_last_page(tmp_path: Path) -> None:
    controller, backend, buffer, _, _ = _controller(tmp_path, pages=1)

    controller.handle("n")

    assert controller.session.start_at == 0
    assert "No more results." in buffer.getvalue()
    assert len(backend.requests) == 2

    controller.handle("n")
    assert len(backend.requests) == 2


def test_previous_and_first_page(tmp_path: Path) -> None:
    controller, backend, _, _, _ = _controller(tmp_path)
    controller.handle("n")

    controller.handle("p")
    assert controller.session.start_at == 0
    controller.handle("p")
    assert controller.session.start_at == 0
    controller.handle("n")
    controller.handle("f")
    assert controller.session.start_at == 0
    assert len(backend.requests) == 2


def test_invalid_time_range_keeps_state(tmp_path: Path) -> None:
    controller, backend, buffer, _, _ = _controller(tmp_path)

    assert controller.handle("r week2") == "displaying-page"

    assert "Invalid time range 'week2'" in buffer.getvalue()
    assert len(controller.session.results) == 5
    assert len(backend.requests) == 1


def test_valid_time_range_resets_and_refetches(tmp_path: Path) -> None:
    controller, backend, _, _, _ = _controller(tmp_path)
    controller.handle("n")

    assert controller.handle("r week") == "displaying-page"

    assert backend.requests[-1] == {"query": "golang", "page_no": 1, "time_range": "week", "site": ""}
    assert controller.session.start_at == 0
    assert len(controller.session.results) == 5


def test_site_filter_resets_and_refetches(tmp_path: Path) -> None:
    controller, backend, _, _, _ = _controller(tmp_path)

    controller.handle("site:go.dev")

    assert backend.requests[-1]["site"] == "go.dev"
    assert backend.requests[-1]["page_no"] == 1
    assert controller.session.options.site == "go.dev"


def test_copy_url_and_invalid_index(tmp_path: Path) -> None:
    controller, _, buffer, _, _ = _controller(tmp_path)

    controller.handle("c 2")
    controller.handle("c 42")
    controller.handle("c two")

    output = buffer.getvalue()
    assert "URL: https://example.com/golang/2" in output
    assert output.count("Invalid index specified.") == 2


def test_show_json_for_index(tmp_path: Path) -> None:
    controller, _, buffer, _, _ = _controller(tmp_path)
    controller.clean = True

    controller.handle("j 1")

    payload = json.loads(buffer.getvalue())
    assert payload["query"] == "golang"
    assert payload["results"] == [
        {
            "title": "golang result 1",
            "url": "https://example.com/golang/1",
            "content": "snippet",
            "engine": "paged",
        }
    ]


def test_open_result_by_index(tmp_path: Path) -> None:
    controller, backend, buffer, opened, _ = _controller(tmp_path)

    controller.handle("3")
    controller.handle("99")

    assert opened == ["https://example.com/golang/3"]
    assert "Invalid index specified." in buffer.getvalue()
    assert controller.state == "displaying-page"
    assert len(backend.requests) == 1


def test_toggle_expand_and_debug(tmp_path: Path) -> None:
    controller, _, buffer, _, debug_calls = _controller(tmp_path)

    controller.handle("x")
    assert controller.expand is True
    assert "     https://example.com/golang/1" in buffer.getvalue()

    controller.handle("d")
    controller.handle("d")
    assert debug_calls == [True, False]
    assert "Debug mode enabled" in buffer.getvalue()
    assert "Debug mode disabled" in buffer.getvalue()


def test_new_query_resets_and_records_history(tmp_path: Path) -> None:
    controller, backend, buffer, _, _ = _controller(tmp_path)
    controller.handle("n")

    controller.handle("rust async")

    assert controller.session.query == "rust async"
    assert controller.session.start_at == 0
    assert backend.requests[-1]["query"] == "rust async"
    assert backend.requests[-1]["page_no"] == 1
    assert all(r.title.startswith("rust async") for r in controller.session.results)
    assert "Query: rust async" in buffer.getvalue()
    assert [e.query for e in controller.history.load()] == ["rust async"]
