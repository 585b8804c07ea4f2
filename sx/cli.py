"""Command line entry point."""

from __future__ import annotations

import argparse
import random
import subprocess
import sys
import webbrowser
from pathlib import Path

from loguru import logger
from rich.console import Console

from sx import __version__
from sx.backends.base import BackendError
from sx.backends.factory import build_backend_manager, valid_backend_names
from sx.backends.manager import SearchError
from sx.backends.models import SearchOptions
from sx.config.loader import load_config
from sx.config.schema import Config
from sx.display import ResultRenderer, render_json
from sx.filters import CATEGORIES, SAFE_SEARCH_LEVELS, TIME_RANGES, validate_safe_search
from sx.history import SearchHistory
from sx.interactive import InteractiveController, prompt_lines
from sx.session import SearchSession

CATEGORY_SHORTCUTS: dict[str, str] = {
    "files": "files",
    "music": "music",
    "news": "news",
    "social": "social media",
    "videos": "videos",
}


def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sx",
        description="Search SearXNG, Brave or Tavily from the command line.",
    )
    parser.add_argument("query", nargs="*", help="search query")
    parser.add_argument("--version", action="version", version=f"sx {__version__}")
    parser.add_argument("--engine", default="", help=f"search backend to use ({valid_backend_names()})")
    parser.add_argument("--searxng-url", default=None, help="SearXNG instance URL")
    parser.add_argument(
        "--categories",
        type=_csv,
        default=None,
        help=f"comma separated categories: {', '.join(CATEGORIES)}",
    )
    parser.add_argument("-e", "--engines", type=_csv, default=None, help="SearXNG engines to use")
    parser.add_argument("-l", "--language", default=None, help="search results in a specific language")
    parser.add_argument(
        "-r",
        "--time-range",
        default="",
        help=f"search results within a time range ({', '.join(TIME_RANGES)})",
    )
    parser.add_argument("-w", "--site", default="", help="search sites using site: operator")
    parser.add_argument(
        "--safe-search",
        default=None,
        help=f"filter results for safe search ({', '.join(SAFE_SEARCH_LEVELS)})",
    )
    parser.add_argument("--unsafe", action="store_true", help="allow unsafe search results")
    parser.add_argument("-n", "--num", type=int, default=None, help="show N results per page")
    parser.add_argument("--http-method", default=None, help="HTTP method for SearXNG (GET or POST)")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP request timeout in seconds")
    parser.add_argument("--no-verify-ssl", action="store_true", help="do not verify SSL certificates")
    parser.add_argument("--noua", action="store_true", help="disable user agent")
    parser.add_argument("--nocolor", action="store_true", help="disable colored output")
    parser.add_argument("--debug", action="store_true", help="show debug output")
    parser.add_argument("-x", "--expand", action="store_true", help="show complete URL in search results")
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="enter interactive mode after displaying results",
    )
    parser.add_argument("--json", action="store_true", help="output search results in JSON format")
    parser.add_argument("-c", "--clean", action="store_true", help="omit empty values in JSON output")
    parser.add_argument("-L", "--links-only", action="store_true", help="output only URLs, one per line")
    parser.add_argument("--top", action="store_true", help="show only the top result")
    parser.add_argument("-j", "--first", action="store_true", help="open the first result and exit")
    parser.add_argument("--lucky", action="store_true", help="open a random result and exit")
    parser.add_argument("-o", "--output", default="", help="save output to file")
    parser.add_argument("-F", "--files", action="store_true", help="show results from files section")
    parser.add_argument("-M", "--music", action="store_true", help="show results from music section")
    parser.add_argument("-N", "--news", action="store_true", help="show results from news section")
    parser.add_argument("-S", "--social", action="store_true", help="show results from social media section")
    parser.add_argument("-V", "--videos", action="store_true", help="show results from videos section")
    return parser


def build_history_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sx history", description="Show or clear search history.")
    parser.add_argument("action", nargs="?", choices=["clear"], help="clear search history")
    parser.add_argument("-n", "--limit", type=int, default=20, help="number of history entries to show")
    return parser


def configure_logging(debug: bool) -> None:
    """Route sx debug logs to stderr, or silence them."""
    logger.remove()
    if debug:
        logger.add(sys.stderr, level="DEBUG", format="<dim>{time:HH:mm:ss}</dim> {level} {message}")
        logger.enable("sx")
    else:
        logger.disable("sx")


def open_in_browser(url: str, handler: str = "") -> None:
    """Open a URL with the configured handler, or the default browser."""
    if handler:
        subprocess.Popen([handler, url], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        return
    if not webbrowser.open(url):
        raise OSError("no browser available")


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    """Apply command line flags on top of the loaded configuration."""
    searxng = config.providers.searxng
    if args.searxng_url is not None:
        searxng.url = args.searxng_url
    if args.http_method:
        searxng.http_method = args.http_method.strip().upper()
    if args.no_verify_ssl:
        searxng.no_verify_ssl = True
    if args.noua:
        searxng.no_user_agent = True
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.num is not None:
        config.result_count = max(0, args.num)
    if args.top:
        config.result_count = 1
    if args.nocolor:
        config.no_color = True
    if args.debug:
        config.debug = True
    if args.expand:
        config.expand = True


def build_options(config: Config, args: argparse.Namespace, query: str) -> SearchOptions:
    categories = args.categories if args.categories is not None else list(config.categories)
    for flag, category in CATEGORY_SHORTCUTS.items():
        if getattr(args, flag):
            categories = [category]

    safe_search = "none" if args.unsafe else (args.safe_search or config.safe_search)
    if not validate_safe_search(safe_search):
        raise ValueError(
            f"Invalid safe search '{safe_search}'. Use: {', '.join(SAFE_SEARCH_LEVELS)}"
        )

    return SearchOptions(
        query=query,
        categories=categories,
        engines=args.engines if args.engines is not None else list(config.engines),
        language=args.language if args.language is not None else config.language,
        time_range=args.time_range,
        site=args.site,
        safe_search=safe_search,
        num_results=config.result_count or 10,
    )


def read_piped_query() -> str:
    return " ".join(line.strip() for line in sys.stdin if line.strip())


def run_history(argv: list[str], config: Config) -> int:
    args = build_history_parser().parse_args(argv)
    history = SearchHistory(enabled=config.history.enabled, max_entries=config.history.max_entries)
    if args.action == "clear":
        history.clear()
        print("History cleared.")
        return 0

    entries = history.load(limit=args.limit)
    if not entries:
        print("No search history.")
        return 0
    for entry in entries:
        print(f"  {entry.timestamp:%Y-%m-%d %H:%M}  {entry.query}")
    return 0


def run_search(args: argparse.Namespace, config: Config, query: str, *, piped: bool) -> int:
    apply_overrides(config, args)
    configure_logging(config.debug)

    engine = (args.engine or "").strip().lower() or None

    try:
        manager = build_backend_manager(config, engine=engine)
        primary = manager.primary
        searxng_only = primary is not None and primary.name == "searxng" and not manager.fallbacks
        if searxng_only and not primary.is_available():
            print("Error: SearXNG URL is not set and no fallback engines are configured", file=sys.stderr)
            print("Set providers.searxng.url in config.json or use --engine brave/tavily", file=sys.stderr)
            return 1
        session = SearchSession(
            manager,
            build_options(config, args, query),
            result_count=config.result_count,
            explicit_backend=engine,
        )
    except (SearchError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    history = SearchHistory(enabled=config.history.enabled, max_entries=config.history.max_entries)
    history.append(query)

    interactive = args.interactive or config.default_output == "interactive"
    if piped or not sys.stdout.isatty():
        interactive = False
    if args.json or args.links_only or args.top:
        interactive = False

    try:
        session.ensure_results()
        if not session.results:
            print("No results found or an error occurred during the search.")
            return 0
        logger.debug("Results served by {}", session.used_backend)

        if args.json:
            output = render_json(session.results, query, clean=args.clean)
            if args.output:
                try:
                    Path(args.output).write_text(output + "\n", encoding="utf-8")
                except OSError as e:
                    print(f"Error writing results to file: {e}", file=sys.stderr)
                    return 1
            else:
                print(output)
            return 0

        if args.first or args.lucky:
            target = session.results[0] if args.first else random.choice(session.results)
            try:
                open_in_browser(target.url, config.url_handler)
            except OSError as e:
                print(f"Error opening URL: {e}", file=sys.stderr)
                return 1
            return 0

        if args.output:
            try:
                with open(args.output, "w", encoding="utf-8") as f:
                    file_renderer = ResultRenderer(
                        Console(file=f, no_color=True, highlight=False, width=100)
                    )
                    _render_page(file_renderer, session, args, expand=config.expand)
            except OSError as e:
                print(f"Error writing results to file: {e}", file=sys.stderr)
                return 1
            return 0

        renderer = ResultRenderer(no_color=config.no_color)
        _render_page(renderer, session, args, expand=config.expand)
        if not interactive:
            return 0

        controller = InteractiveController(
            session,
            renderer,
            history=history,
            open_url=lambda url: open_in_browser(url, config.url_handler),
            on_debug_toggle=configure_logging,
            expand=config.expand,
            debug=config.debug,
            clean=args.clean,
        )
        controller.run(prompt_lines())
    except (SearchError, BackendError) as e:
        print(f"Search error: {e}", file=sys.stderr)
        return 1
    return 0


def _render_page(
    renderer: ResultRenderer,
    session: SearchSession,
    args: argparse.Namespace,
    *,
    expand: bool,
) -> None:
    if args.links_only:
        renderer.print_links(session.window())
        return
    renderer.print_results(
        session.results,
        start_at=session.start_at,
        count=session.result_count,
        query=session.query,
        expand=expand,
    )


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    config = load_config()

    if argv and argv[0] == "history":
        return run_history(argv[1:], config)

    parser = build_parser()
    args = parser.parse_args(argv)

    piped = not sys.stdin.isatty()
    if args.query:
        query = " ".join(args.query)
    elif piped:
        query = read_piped_query()
        if not query:
            print("Error: empty input from stdin", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0

    try:
        return run_search(args, config, query, piped=piped)
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
