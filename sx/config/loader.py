"""Configuration loading utilities."""

import json
import os
import re
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sx.config.schema import Config


def get_config_dir() -> Path:
    """Get the sx configuration directory, honoring XDG_CONFIG_HOME."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "sx"


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return get_config_dir() / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            data = _migrate_config(data)
            return Config.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValidationError, ValueError) as e:
            print(f"Warning: Failed to load config from {path}: {e}", file=sys.stderr)
            print("Using default configuration.", file=sys.stderr)

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump())

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case recursively."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase recursively."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def _pop_legacy(data: dict, camel_key: str) -> Any:
    """Pop a legacy key written either in camelCase or snake_case."""
    snake_key = camel_to_snake(camel_key)
    value = data.pop(camel_key, None)
    snake_value = data.pop(snake_key, None) if snake_key != camel_key else None
    return value if value is not None else snake_value


def _migrate_config(data: dict) -> dict:
    """Migrate old config formats to current."""
    providers = data.setdefault("providers", {})

    # Move flat searxng* keys -> providers.searxng.*
    searxng_cfg = providers.setdefault("searxng", {})
    legacy_searxng = {
        "searxngUrl": "url",
        "searxngUsername": "username",
        "searxngPassword": "password",
        "httpMethod": "httpMethod",
        "noVerifySsl": "noVerifySsl",
        "noUserAgent": "noUserAgent",
    }
    for legacy_key, new_key in legacy_searxng.items():
        value = _pop_legacy(data, legacy_key)
        if value is not None and new_key not in searxng_cfg:
            searxng_cfg[new_key] = value

    # Move enginesBrave / enginesTavily -> providers.brave / providers.tavily
    for legacy_key, name in (("enginesBrave", "brave"), ("enginesTavily", "tavily")):
        legacy_cfg = _pop_legacy(data, legacy_key)
        if not isinstance(legacy_cfg, dict):
            continue
        provider_cfg = providers.setdefault(name, {})
        for key, value in legacy_cfg.items():
            new_key = snake_to_camel(key)
            if not provider_cfg.get(new_key):
                provider_cfg[new_key] = value

    # Move historyEnabled / maxHistory -> history.*
    history_cfg = data.setdefault("history", {})
    enabled = _pop_legacy(data, "historyEnabled")
    if enabled is not None and "enabled" not in history_cfg:
        history_cfg["enabled"] = enabled
    max_history = _pop_legacy(data, "maxHistory")
    if max_history is not None and "maxEntries" not in history_cfg:
        history_cfg["maxEntries"] = max_history

    # Drop the JSON schema pointer carried over from older files
    data.pop("$schema", None)

    return data
