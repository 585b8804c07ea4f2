import copy
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from sx.config.loader import (
    _migrate_config,
    convert_keys,
    convert_to_camel,
    get_config_path,
    load_config,
    save_config,
)
from sx.config.schema import Config


def test_config_defaults() -> None:
    config = Config()

    assert config.engine == "searxng"
    assert config.fallback_engines == []
    assert config.result_count == 10
    assert config.safe_search == "strict"
    assert config.timeout == 30.0
    assert config.providers.searxng.http_method == "GET"
    assert config.providers.tavily.search_depth == "basic"
    assert config.providers.brave.base_url == "https://api.search.brave.com/res/v1/web/search"
    assert config.history.enabled is True
    assert config.history.max_entries == 100


def test_config_roundtrip_with_camel_case(tmp_path: Path) -> None:
    config = Config()
    config.fallback_engines = ["brave", "tavily"]
    config.providers.searxng.url = "https://searx.example.com"
    config.providers.tavily.include_raw_content = True
    path = tmp_path / "config.json"

    save_config(config, path)
    raw = json.loads(path.read_text())
    reloaded = load_config(path)

    assert raw["fallbackEngines"] == ["brave", "tavily"]
    assert raw["providers"]["tavily"]["includeRawContent"] is True
    assert reloaded == config


def test_convert_keys_roundtrip() -> None:
    data = {"resultCount": 5, "providers": {"searxng": {"noVerifySsl": True}}}

    assert convert_keys(data) == {"result_count": 5, "providers": {"searxng": {"no_verify_ssl": True}}}
    assert convert_to_camel(convert_keys(data)) == data


def test_migrate_legacy_flat_searxng_keys() -> None:
    raw = {
        "$schema": "https://example.com/schema.json",
        "searxngUrl": "https://searx.example.com",
        "searxng_username": "me",
        "searxngPassword": "pw",
        "httpMethod": "POST",
        "historyEnabled": False,
        "maxHistory": 20,
    }

    migrated = _migrate_config(copy.deepcopy(raw))

    assert migrated["providers"]["searxng"] == {
        "url": "https://searx.example.com",
        "username": "me",
        "password": "pw",
        "httpMethod": "POST",
    }
    assert migrated["history"] == {"enabled": False, "maxEntries": 20}
    assert "$schema" not in migrated
    assert "searxngUrl" not in migrated


def test_migrate_legacy_engine_sections() -> None:
    raw = {
        "enginesBrave": {"api_key": "legacy-brave"},
        "engines_tavily": {"api_key": "legacy-tavily", "search_depth": "advanced"},
    }

    migrated = _migrate_config(copy.deepcopy(raw))

    assert migrated["providers"]["brave"]["apiKey"] == "legacy-brave"
    assert migrated["providers"]["tavily"] == {"apiKey": "legacy-tavily", "searchDepth": "advanced"}


def test_migrate_does_not_override_new_layout() -> None:
    raw = {
        "searxngUrl": "https://old.example.com",
        "enginesBrave": {"apiKey": "legacy-key"},
        "providers": {
            "searxng": {"url": "https://new.example.com"},
            "brave": {"apiKey": "new-key"},
        },
    }

    migrated = _migrate_config(copy.deepcopy(raw))

    assert migrated["providers"]["searxng"]["url"] == "https://new.example.com"
    assert migrated["providers"]["brave"]["apiKey"] == "new-key"


def test_load_config_falls_back_to_defaults_on_invalid_file(tmp_path: Path, capsys) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")

    config = load_config(path)

    assert config == Config()
    assert "Failed to load config" in capsys.readouterr().err


def test_load_config_rejects_invalid_values(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"safeSearch": "maybe"}))

    assert load_config(path).safe_search == "strict"


def test_config_normalizes_categories_and_method() -> None:
    config = Config.model_validate(
        {"categories": ["social-media"], "providers": {"searxng": {"http_method": "post"}}}
    )

    assert config.categories == ["social media"]
    assert config.providers.searxng.http_method == "POST"

    with pytest.raises(ValidationError):
        Config.model_validate({"categories": ["recipes"]})


def test_config_path_honors_xdg(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert get_config_path() == tmp_path / "sx" / "config.json"
