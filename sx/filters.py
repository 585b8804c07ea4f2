"""Normalization and validation of search filters shared by every backend."""

from __future__ import annotations

from typing import Iterable, Literal

TimeRange = Literal["day", "week", "month", "year"]
SafeSearch = Literal["none", "moderate", "strict"]

CATEGORIES: tuple[str, ...] = (
    "general",
    "news",
    "videos",
    "images",
    "music",
    "map",
    "science",
    "it",
    "files",
    "social media",
)

CATEGORY_ALIASES: dict[str, str] = {
    "social+media": "social media",
    "social-media": "social media",
    "social_media": "social media",
    "socialmedia": "social media",
}

TIME_RANGES: tuple[TimeRange, ...] = ("day", "week", "month", "year")
TIME_RANGE_SHORTHANDS: dict[str, TimeRange] = {
    "d": "day",
    "w": "week",
    "m": "month",
    "y": "year",
}

SAFE_SEARCH_LEVELS: tuple[SafeSearch, ...] = ("none", "moderate", "strict")


def normalize_category(category: str) -> str:
    """Map a category alias to its canonical form; unknown values pass through."""
    return CATEGORY_ALIASES.get(category, category)


def validate_category(category: str) -> bool:
    return normalize_category(category) in CATEGORIES


def normalize_categories(categories: Iterable[str] | None) -> list[str]:
    """Normalize every category, rejecting the first one that is not recognized."""
    normalized: list[str] = []
    for category in categories or []:
        value = normalize_category(category.strip())
        if value not in CATEGORIES:
            raise ValueError(
                f"Invalid category '{category}'. "
                f"Supported categories are: {', '.join(CATEGORIES)}"
            )
        if value not in normalized:
            normalized.append(value)
    return normalized


def validate_time_range(time_range: str) -> bool:
    return time_range in TIME_RANGES or time_range in TIME_RANGE_SHORTHANDS


def expand_time_range(time_range: str) -> str:
    """Expand d/w/m/y shorthands. Anything else is returned unchanged."""
    return TIME_RANGE_SHORTHANDS.get(time_range, time_range)


def normalize_time_range(time_range: str | None) -> str:
    value = (time_range or "").strip()
    if not value:
        return ""
    if not validate_time_range(value):
        raise ValueError(f"Invalid time range '{value}'. Use: {', '.join(TIME_RANGES)}")
    return expand_time_range(value)


def validate_safe_search(level: str) -> bool:
    return level in SAFE_SEARCH_LEVELS
