"""Tests for config schema validation."""

import pytest
from pydantic import ValidationError

from weathersync.config.schema import ApiConfig, AppConfig, SettingsDefaults, SyncConfig
from weathersync.models.common import TemperatureUnit


class TestSchema:
    def test_defaults(self):
        config = AppConfig()
        assert config.api.base_url == "https://api.openweathermap.org"
        assert config.cache.data_dir == "data"
        assert config.sync.warm_favorites is True
        assert config.settings.unit == TemperatureUnit.CELSIUS

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            ApiConfig(max_retries=-1)

    def test_negative_refresh_interval_rejected(self):
        with pytest.raises(ValidationError):
            SettingsDefaults(refresh_interval_minutes=-5)

    def test_negative_warm_delay_rejected(self):
        with pytest.raises(ValidationError):
            SyncConfig(warm_delay_ms=-1)

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            AppConfig(unknown={})


class TestTemperatureUnit:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("C", TemperatureUnit.CELSIUS),
            ("°C", TemperatureUnit.CELSIUS),
            ("metric", TemperatureUnit.CELSIUS),
            ("f", TemperatureUnit.FAHRENHEIT),
            ("°F", TemperatureUnit.FAHRENHEIT),
            ("K", TemperatureUnit.KELVIN),
            ("", TemperatureUnit.KELVIN),
            (None, TemperatureUnit.KELVIN),
            ("rankine", TemperatureUnit.KELVIN),
        ],
    )
    def test_parse(self, raw, expected):
        assert TemperatureUnit.parse(raw) == expected

    def test_units_param(self):
        assert TemperatureUnit.CELSIUS.units_param == "metric"
        assert TemperatureUnit.FAHRENHEIT.units_param == "imperial"
        assert TemperatureUnit.KELVIN.units_param == "standard"

    def test_wind_speed_label(self):
        assert TemperatureUnit.CELSIUS.wind_speed_label == "m/s"
        assert TemperatureUnit.FAHRENHEIT.wind_speed_label == "mph"
