"""Tests for config loading, env overrides and get/set."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from weathersync.config.loader import (
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from weathersync.config.schema import AppConfig
from weathersync.models.common import TemperatureUnit


class TestLoadConfig:
    def test_load_from_yaml(self, config_yaml_path: Path):
        config = load_config(config_yaml_path)
        assert config.api.api_key == "test-key"
        assert config.api.timeout == 10.0
        assert config.sync.default_location == "Paris"
        assert config.settings.unit == TemperatureUnit.FAHRENHEIT

    def test_missing_file_uses_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
        config = load_config(tmp_path / "nope.yaml")
        assert config == AppConfig()

    def test_empty_yaml_uses_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.sync.default_location == "London"
        assert config.settings.refresh_interval_minutes == 0

    def test_api_key_from_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("OPENWEATHER_API_KEY", "env-key")
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).api.api_key == "env-key"
        assert load_config(path, apply_env=False).api.api_key == ""

    def test_explicit_api_key_wins_over_env(self, config_yaml_path: Path, monkeypatch):
        monkeypatch.setenv("OPENWEATHER_API_KEY", "env-key")
        assert load_config(config_yaml_path).api.api_key == "test-key"

    def test_blank_default_location_falls_back(self, tmp_path: Path):
        path = tmp_path / "blank.yaml"
        path.write_text(yaml.dump({"sync": {"default_location": ""}}))
        assert load_config(path).sync.default_location == "London"

    def test_unknown_key_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"api": {"bogus": 1}}))
        with pytest.raises(ValidationError):
            load_config(path)


class TestGetSetValue:
    def test_get_nested(self):
        assert get_config_value(AppConfig(), "api.max_retries") == 2

    def test_get_missing_raises(self):
        with pytest.raises(KeyError):
            get_config_value(AppConfig(), "api.nope")

    def test_set_coerces_int(self):
        config = set_config_value(AppConfig(), "api.max_retries", "5")
        assert config.api.max_retries == 5

    def test_set_coerces_bool(self):
        config = set_config_value(AppConfig(), "sync.warm_favorites", "false")
        assert config.sync.warm_favorites is False

    def test_set_revalidates(self):
        with pytest.raises(ValidationError):
            set_config_value(AppConfig(), "api.timeout", "-1")

    def test_set_unknown_key(self):
        with pytest.raises(KeyError):
            set_config_value(AppConfig(), "api.nope", "1")

    def test_save_round_trip(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("OPENWEATHER_API_KEY", raising=False)
        config = set_config_value(AppConfig(), "sync.default_location", "Oslo")
        path = tmp_path / "out" / "config.yaml"
        save_config(config, path)
        assert load_config(path) == config
