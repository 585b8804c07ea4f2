"""Build a BackendManager from configuration."""

from __future__ import annotations

import os

from loguru import logger

from sx.backends.brave import BraveBackend
from sx.backends.manager import BackendManager
from sx.backends.searxng import SearxngBackend
from sx.backends.tavily import TavilyBackend
from sx.config.schema import Config

BACKEND_NAMES: tuple[str, ...] = ("searxng", "brave", "tavily")

_ENV_KEYS: dict[str, str] = {
    "searxng": "SEARXNG_URL",
    "brave": "BRAVE_API_KEY",
    "tavily": "TAVILY_API_KEY",
}


def valid_backend_names() -> str:
    return ", ".join(BACKEND_NAMES)


def build_backend_manager(config: Config, engine: str | None = None) -> BackendManager:
    """Register every backend and wire up primary and fallbacks.

    Args:
        config: Loaded configuration.
        engine: Optional backend name overriding ``config.engine`` as primary.

    Returns:
        Manager ready to search.
    """
    providers = config.providers
    manager = BackendManager()

    searxng_cfg = providers.searxng
    manager.register(
        SearxngBackend(
            searxng_cfg.url or os.environ.get(_ENV_KEYS["searxng"], ""),
            username=searxng_cfg.username,
            password=searxng_cfg.password,
            http_method=searxng_cfg.http_method,
            timeout=config.timeout,
            no_verify_ssl=searxng_cfg.no_verify_ssl,
            no_user_agent=searxng_cfg.no_user_agent,
        )
    )
    manager.register(
        BraveBackend(
            providers.brave.api_key or os.environ.get(_ENV_KEYS["brave"], ""),
            base_url=providers.brave.base_url,
            timeout=config.timeout,
        )
    )
    tavily_cfg = providers.tavily
    manager.register(
        TavilyBackend(
            tavily_cfg.api_key or os.environ.get(_ENV_KEYS["tavily"], ""),
            base_url=tavily_cfg.base_url,
            timeout=config.timeout,
            search_depth=tavily_cfg.search_depth,
            include_raw_content=tavily_cfg.include_raw_content,
            include_answer=tavily_cfg.include_answer,
        )
    )

    primary = (engine or config.engine or "searxng").strip().lower()
    manager.set_primary(primary)

    fallbacks = [name.strip().lower() for name in config.fallback_engines if name.strip()]
    manager.set_fallbacks([name for name in dict.fromkeys(fallbacks) if name != primary])

    logger.debug(
        "Backends: primary={}, fallbacks={}, configured={}",
        primary,
        [b.name for b in manager.fallbacks],
        manager.configured_backends(),
    )
    return manager
