"""YAML config loader with environment overrides and runtime get/set."""

import json
import os
from pathlib import Path
from typing import Any

import yaml

from weathersync.config.defaults import API_KEY_ENV, DEFAULT_LOCATION
from weathersync.config.schema import AppConfig


def load_config(path: str | Path | None = None, apply_env: bool = True) -> AppConfig:
    """Load and validate config from a YAML file.

    A missing file yields the defaults. An empty api_key is filled from
    OPENWEATHER_API_KEY unless apply_env is False. An empty default_location
    falls back to DEFAULT_LOCATION.
    """
    raw: dict[str, Any] = {}
    if path is not None and Path(path).exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    api = raw.setdefault("api", {}) or {}
    raw["api"] = api
    if apply_env and not api.get("api_key"):
        env_key = os.environ.get(API_KEY_ENV, "")
        if env_key:
            api["api_key"] = env_key

    sync = raw.get("sync") or {}
    if "default_location" in sync and not sync["default_location"]:
        sync["default_location"] = DEFAULT_LOCATION

    return AppConfig(**raw)


def get_config_value(config: AppConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'api.timeout'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if isinstance(obj, list):
            obj = obj[int(part)]
        elif hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: AppConfig, dotted_key: str, value: Any) -> AppConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new AppConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    old_value = target.get(parts[-1])
    if isinstance(old_value, bool) and isinstance(value, str):
        value = value.strip().lower() in ("1", "true", "yes", "on")
    elif isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return AppConfig(**data)


def save_config(config: AppConfig, path: str | Path) -> None:
    """Write the config back as YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(json.loads(config.model_dump_json()), f, sort_keys=False)
