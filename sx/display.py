"""Terminal and JSON rendering of search results."""

from __future__ import annotations

import html
import json
import re
from datetime import datetime
from typing import Any, Iterable
from urllib.parse import urlparse

from rich.console import Console
from rich.markup import escape
from rich.padding import Padding
from rich.text import Text

from sx.backends.models import SearchResult

MAX_CONTENT_WORDS = 128
MAX_TITLE_CHARS = 70

_TAG_RE = re.compile(r"<[^>]*>")
_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%B %d, %Y",
    "%b %d, %Y",
)

HELP_TEXT = """
- Enter a search query to perform a new search.
- Type 'n', 'p', and 'f' to navigate to the next, previous and first page of results.
- Type the index (1, 2, 3, etc) to open the search result in a browser.
- Type 'c' plus the index ('c 1', 'c 2') to show the result URL.
- Type 'r timerange' to change the search time range (e.g. 'r week').
- Type 'site:example.com' to filter results by a specific site.
- Type 'x' to toggle showing result URLs.
- Type 'd' to toggle debug output.
- Type 'j' plus the index ('j 1', 'j 2') to show the JSON result for the specified index.
- Type 'q', 'quit', or 'exit' to exit the program.
- Type '?' for this help message.
"""


def extract_domain(url: str) -> str:
    if not url:
        return ""
    parsed = urlparse(url)
    if parsed.netloc:
        return parsed.netloc
    return url.split("/", 1)[0]


def format_content(content: str, max_words: int = MAX_CONTENT_WORDS) -> str:
    """Strip HTML and cap the snippet at ``max_words`` words."""
    text = _TAG_RE.sub("", html.unescape(content))
    words = text.split()
    if len(words) > max_words:
        return " ".join(words[:max_words]) + " ..."
    return " ".join(words)


def format_length(length: Any) -> str:
    if isinstance(length, bool) or length is None:
        return ""
    if isinstance(length, (int, float)):
        minutes, seconds = divmod(int(length), 60)
        return f"{minutes:02d}:{seconds:02d}"
    if isinstance(length, str):
        return length
    return ""


def parse_date(value: str) -> datetime | None:
    value = (value or "").strip()
    if not value:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def _format_date(value: str) -> str:
    date = parse_date(value)
    return f"{date:%B} {date.day}, {date.year}" if date else ""


def engine_summary(result: SearchResult) -> str:
    """Main engine first, followed by the other contributing engines."""
    others = [e for e in result.engines if e != result.engine]
    names = ([result.engine] if result.engine else []) + others
    return ", ".join(names)


def category_lines(result: SearchResult) -> list[str]:
    """Extra detail lines for category-specific result attributes."""
    lines: list[str] = []
    category = result.category

    if category in ("news", "social media"):
        date = _format_date(result.published_date)
        if date:
            lines.append(date)

    elif category == "images":
        if result.resolution or result.source:
            lines.append(f"{result.resolution} {result.source}".strip())
        if result.img_src:
            lines.append(result.img_src)

    elif category in ("videos", "music"):
        parts = [p for p in (format_length(result.length), result.author) if p]
        if parts:
            lines.append(" ".join(parts))

    elif category == "map":
        address = result.address
        street = " ".join(str(address[k]) for k in ("house_number", "road") if address.get(k))
        city = ", ".join(str(address[k]) for k in ("locality", "postcode") if address.get(k))
        lines.extend(part for part in (street, city, str(address.get("country") or "")) if part)
        if result.latitude or result.longitude:
            lines.append(f"{result.latitude:.6f}, {result.longitude:.6f}")

    elif category == "science":
        parts = [_format_date(result.published_date), result.journal, result.publisher]
        joined = " ".join(p for p in parts if p)
        if joined:
            lines.append(joined)

    elif category == "files":
        if result.template == "torrent.html":
            if result.magnet_link:
                lines.append(result.magnet_link)
            lines.append(f"{result.file_size} ↑{result.seed} seeders, ↓{result.leech} leechers")
        elif result.template == "files.html":
            lines.append(f"{result.size} {result.metadata}".strip())

    return lines


class ResultRenderer:
    """Render results to a rich console."""

    def __init__(self, console: Console | None = None, *, no_color: bool = False):
        self.console = console or Console(no_color=no_color, highlight=False)

    def print_results(
        self,
        results: list[SearchResult],
        *,
        start_at: int,
        count: int,
        query: str,
        expand: bool = False,
    ) -> None:
        console = self.console
        console.print()
        console.print(Text.assemble("Query: ", (query, "bold")))
        console.print()

        end = len(results) if count <= 0 else min(len(results), start_at + count)
        for index in range(start_at, end):
            result = results[index]
            title = result.display_title
            if len(title) > MAX_TITLE_CHARS:
                title = title[: MAX_TITLE_CHARS - 3] + "..."

            console.print(
                Text.assemble(
                    (f" {index + 1:2d}.", "cyan"),
                    " ",
                    (title, "bold green"),
                    " ",
                    (f"[{extract_domain(result.url)}]", "yellow"),
                )
            )
            if expand and result.url:
                console.print(f"     {escape(result.url)}")
            if result.content:
                console.print(Padding(Text(format_content(result.content)), (0, 0, 0, 5)))
            for line in category_lines(result):
                console.print(Text(f"     {line}", style="dim"))
            engines = engine_summary(result)
            if engines:
                console.print(Text(f"     [{engines}]", style="dim"))
            console.print()

    def print_json(self, results: Iterable[SearchResult], query: str, *, clean: bool = False) -> None:
        self.console.print_json(render_json(results, query, clean=clean))

    def print_links(self, results: Iterable[SearchResult]) -> None:
        for result in results:
            if result.url:
                self.console.print(result.url, markup=False, highlight=False, soft_wrap=True)

    def print_help(self) -> None:
        self.console.print(HELP_TEXT, markup=False, highlight=False)

    def print_message(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)

    def print_error(self, message: str) -> None:
        self.console.print(Text(message, style="red"), soft_wrap=True)


def render_json(results: Iterable[SearchResult], query: str, *, clean: bool = False) -> str:
    items = [r.to_clean_dict() if clean else r.to_dict() for r in results]
    return json.dumps({"query": query, "results": items}, indent=2, ensure_ascii=False)
