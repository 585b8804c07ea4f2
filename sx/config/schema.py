"""Configuration schema using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from sx.backends.brave import DEFAULT_BRAVE_URL
from sx.backends.tavily import DEFAULT_TAVILY_URL
from sx.filters import SAFE_SEARCH_LEVELS, normalize_categories


class SearxngConfig(BaseModel):
    """SearXNG instance configuration."""

    url: str = ""
    username: str = ""
    password: str = ""
    http_method: Literal["GET", "POST"] = "GET"
    no_verify_ssl: bool = False
    no_user_agent: bool = False

    @field_validator("http_method", mode="before")
    @classmethod
    def _upper_method(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value


class BraveConfig(BaseModel):
    """Brave Search API configuration."""

    api_key: str = ""
    base_url: str = DEFAULT_BRAVE_URL


class TavilyConfig(BaseModel):
    """Tavily Search API configuration."""

    api_key: str = ""
    base_url: str = DEFAULT_TAVILY_URL
    search_depth: Literal["basic", "advanced"] = "basic"
    include_raw_content: bool = False
    include_answer: bool = False


class ProvidersConfig(BaseModel):
    """Per-backend configuration."""

    searxng: SearxngConfig = Field(default_factory=SearxngConfig)
    brave: BraveConfig = Field(default_factory=BraveConfig)
    tavily: TavilyConfig = Field(default_factory=TavilyConfig)


class HistoryConfig(BaseModel):
    """Search history configuration."""

    enabled: bool = True
    max_entries: int = 100


class Config(BaseModel):
    """Root configuration for sx."""

    engine: str = "searxng"
    fallback_engines: list[str] = Field(default_factory=list)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    result_count: int = 10
    categories: list[str] = Field(default_factory=list)
    engines: list[str] = Field(default_factory=list)
    safe_search: str = "strict"
    language: str = ""
    timeout: float = 30.0
    expand: bool = False
    no_color: bool = False
    debug: bool = False
    url_handler: str = ""
    default_output: Literal["", "interactive"] = ""
    history: HistoryConfig = Field(default_factory=HistoryConfig)

    @field_validator("safe_search")
    @classmethod
    def _check_safe_search(cls, value: str) -> str:
        if value not in SAFE_SEARCH_LEVELS:
            raise ValueError(f"safe_search must be one of {list(SAFE_SEARCH_LEVELS)}")
        return value

    @field_validator("categories")
    @classmethod
    def _check_categories(cls, value: list[str]) -> list[str]:
        return normalize_categories(value)

    @field_validator("result_count")
    @classmethod
    def _check_result_count(cls, value: int) -> int:
        if value < 0:
            raise ValueError("result_count must be >= 0")
        return value
