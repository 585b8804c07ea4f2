"""Shared search models."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from sx.filters import normalize_categories, normalize_time_range

# JSON key for fields whose wire name differs from the attribute name.
_WIRE_KEYS: dict[str, str] = {
    "published_date": "publishedDate",
    "magnet_link": "magnetlink",
    "file_size": "filesize",
}


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _as_float(value: Any) -> float:
    try:
        return float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0


@dataclass(slots=True)
class SearchResult:
    """Normalized search result item.

    ``url`` is the only field callers may rely on for open/copy actions; the
    rest is provider supplied and may be empty.
    """

    title: str = ""
    url: str = ""
    content: str = ""
    engine: str = ""
    engines: list[str] = field(default_factory=list)
    category: str = ""
    template: str = ""
    published_date: str = ""
    author: str = ""
    length: Any = None
    source: str = ""
    resolution: str = ""
    img_src: str = ""
    address: dict[str, Any] = field(default_factory=dict)
    longitude: float = 0.0
    latitude: float = 0.0
    journal: str = ""
    publisher: str = ""
    magnet_link: str = ""
    seed: int = 0
    leech: int = 0
    file_size: str = ""
    size: str = ""
    metadata: str = ""

    @property
    def display_title(self) -> str:
        return self.title or "No title"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchResult":
        if not isinstance(data, dict):
            raise ValueError("search result must be an object")

        engines = data.get("engines") or []
        if not isinstance(engines, list):
            engines = [engines]
        address = data.get("address")

        return cls(
            title=_as_str(data.get("title")),
            url=_as_str(data.get("url")),
            content=_as_str(data.get("content")),
            engine=_as_str(data.get("engine")),
            engines=[_as_str(e) for e in engines if e],
            category=_as_str(data.get("category")),
            template=_as_str(data.get("template")),
            published_date=_as_str(data.get("publishedDate")),
            author=_as_str(data.get("author")),
            length=data.get("length"),
            source=_as_str(data.get("source")),
            resolution=_as_str(data.get("resolution")),
            img_src=_as_str(data.get("img_src")),
            address=dict(address) if isinstance(address, dict) else {},
            longitude=_as_float(data.get("longitude")),
            latitude=_as_float(data.get("latitude")),
            journal=_as_str(data.get("journal")),
            publisher=_as_str(data.get("publisher")),
            magnet_link=_as_str(data.get("magnetlink")),
            seed=_as_int(data.get("seed")),
            leech=_as_int(data.get("leech")),
            file_size=_as_str(data.get("filesize")),
            size=_as_str(data.get("size")),
            metadata=_as_str(data.get("metadata")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            _WIRE_KEYS.get(f.name, f.name): getattr(self, f.name)
            for f in dataclasses.fields(self)
        }

    def to_clean_dict(self) -> dict[str, Any]:
        """Like ``to_dict`` but without empty, null or zero values."""
        cleaned: dict[str, Any] = {}
        for key, value in self.to_dict().items():
            if value is None or value == "" or value == 0 or value == [] or value == {}:
                continue
            cleaned[key] = value
        return cleaned


@dataclass(slots=True)
class SearchOptions:
    """Parameters for one search request."""

    query: str = ""
    categories: list[str] = field(default_factory=list)
    engines: list[str] = field(default_factory=list)
    language: str = ""
    time_range: str = ""
    site: str = ""
    safe_search: str = ""
    page_no: int = 1
    num_results: int = 10

    def normalized(self) -> "SearchOptions":
        """Return a copy with canonical categories and an expanded time range.

        Raises ValueError for an unknown category or time range.
        """
        return dataclasses.replace(
            self,
            categories=normalize_categories(self.categories),
            engines=[e.strip() for e in self.engines if e and e.strip()],
            time_range=normalize_time_range(self.time_range),
            site=self.site.strip(),
            page_no=max(1, self.page_no),
        )
