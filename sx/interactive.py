"""Interactive command loop over a search session."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Literal

from loguru import logger

from sx.backends.models import SearchResult
from sx.display import ResultRenderer
from sx.history import SearchHistory
from sx.session import SearchSession

ControllerState = Literal["displaying-page", "awaiting-fetch", "terminated"]

PROMPT = "sx (? for help): "
QUIT_COMMANDS = frozenset({"q", "quit", "exit"})


def prompt_lines(prompt: str = PROMPT) -> Iterator[str]:
    """Yield lines typed at the prompt until EOF."""
    while True:
        try:
            yield input(prompt)
        except EOFError:
            return


class InteractiveController:
    """State machine driven by one line of user input at a time.

    Every command either terminates, redisplays the current page, or resets
    or advances the session and fetches before displaying. Validation
    failures are reported and leave the session untouched. Search errors
    raised while fetching propagate to the caller.
    """

    def __init__(
        self,
        session: SearchSession,
        renderer: ResultRenderer,
        *,
        history: SearchHistory | None = None,
        open_url: Callable[[str], None] | None = None,
        on_debug_toggle: Callable[[bool], None] | None = None,
        expand: bool = False,
        debug: bool = False,
        clean: bool = False,
    ):
        self.session = session
        self.renderer = renderer
        self.history = history
        self.open_url = open_url
        self.on_debug_toggle = on_debug_toggle
        self.expand = expand
        self.debug = debug
        self.clean = clean
        self.state: ControllerState = "displaying-page"

        self._commands: dict[str, Callable[[], ControllerState]] = {
            "?": self._help,
            "n": self._next_page,
            "p": self._previous_page,
            "f": self._first_page,
            "x": self._toggle_expand,
            "d": self._toggle_debug,
        }
        self._prefixed: tuple[tuple[str, Callable[[str], ControllerState]], ...] = (
            ("r ", self._change_time_range),
            ("site:", self._change_site),
            ("c ", self._show_url),
            ("j ", self._show_json),
        )

    def run(self, lines: Iterable[str]) -> ControllerState:
        """Feed lines through ``handle`` until the user quits or input ends."""
        for line in lines:
            if self.handle(line) == "terminated":
                break
        return self.state

    def handle(self, line: str) -> ControllerState:
        """Process one input line and return the resulting state."""
        if self.state == "terminated":
            return self.state

        command = line.strip()
        logger.debug("Interactive command: {!r}", command)
        self.state = self._dispatch(command)

        if self.state == "awaiting-fetch":
            self._fetch_and_display()
            self.state = "displaying-page"
        return self.state

    def display(self) -> None:
        session = self.session
        self.renderer.print_results(
            session.results,
            start_at=session.start_at,
            count=session.result_count,
            query=session.query,
            expand=self.expand,
        )

    def _dispatch(self, command: str) -> ControllerState:
        if not command:
            return "displaying-page"
        if command in QUIT_COMMANDS:
            return "terminated"
        if command in self._commands:
            return self._commands[command]()
        for prefix, handler in self._prefixed:
            if command.startswith(prefix):
                return handler(command[len(prefix):].strip())
        if command.isdigit():
            return self._open_result(command)
        return self._new_query(command)

    def _fetch_and_display(self) -> None:
        session = self.session
        session.ensure_results()
        if not session.results:
            self.renderer.print_message("No results found.")
            return
        if session.start_at >= len(session.results):
            session.previous_page()
            self.renderer.print_message("No more results.")
            return
        self.display()

    def _help(self) -> ControllerState:
        self.renderer.print_help()
        return "displaying-page"

    def _next_page(self) -> ControllerState:
        self.session.next_page()
        if self.session.needs_fetch():
            return "awaiting-fetch"
        if self.session.start_at >= len(self.session.results):
            self.session.previous_page()
            self.renderer.print_message("No more results.")
            return "displaying-page"
        self.display()
        return "displaying-page"

    def _previous_page(self) -> ControllerState:
        self.session.previous_page()
        self.display()
        return "displaying-page"

    def _first_page(self) -> ControllerState:
        self.session.first_page()
        self.display()
        return "displaying-page"

    def _toggle_expand(self) -> ControllerState:
        self.expand = not self.expand
        self.display()
        return "displaying-page"

    def _toggle_debug(self) -> ControllerState:
        self.debug = not self.debug
        if self.on_debug_toggle:
            self.on_debug_toggle(self.debug)
        self.renderer.print_message(f"Debug mode {'enabled' if self.debug else 'disabled'}")
        return "displaying-page"

    def _change_time_range(self, value: str) -> ControllerState:
        try:
            self.session.set_time_range(value)
        except ValueError as e:
            self.renderer.print_error(str(e))
            return "displaying-page"
        return "awaiting-fetch"

    def _change_site(self, value: str) -> ControllerState:
        self.session.set_site(value)
        return "awaiting-fetch"

    def _show_url(self, value: str) -> ControllerState:
        result = self._result_at(value)
        if result is not None:
            self.renderer.print_message(f"URL: {result.url}")
        return "displaying-page"

    def _show_json(self, value: str) -> ControllerState:
        result = self._result_at(value)
        if result is not None:
            self.renderer.print_json([result], self.session.query, clean=self.clean)
        return "displaying-page"

    def _open_result(self, value: str) -> ControllerState:
        result = self._result_at(value)
        if result is None:
            return "displaying-page"
        if not result.url:
            self.renderer.print_error("Result has no URL.")
        elif self.open_url is None:
            self.renderer.print_message(f"URL: {result.url}")
        else:
            try:
                self.open_url(result.url)
            except OSError as e:
                self.renderer.print_error(f"Error opening URL: {e}")
        return "displaying-page"

    def _new_query(self, query: str) -> ControllerState:
        self.session.set_query(query)
        if self.history is not None:
            self.history.append(query)
        return "awaiting-fetch"

    def _result_at(self, value: str) -> SearchResult | None:
        """Look up a 1-based result index, reporting invalid input."""
        try:
            index = int(value)
        except ValueError:
            index = 0
        if not 1 <= index <= len(self.session.results):
            self.renderer.print_error("Invalid index specified.")
            return None
        return self.session.results[index - 1]
