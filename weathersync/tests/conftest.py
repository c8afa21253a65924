"""Shared test fixtures."""

import json
from pathlib import Path

import pytest
import yaml

from weathersync.config.schema import AppConfig, SyncConfig
from weathersync.storage.cache_store import LocalCacheStore
from weathersync.store.weather_state import WeatherStateStore

FIXTURE_DIR = Path(__file__).parent / "fixtures"

# 2025-06-01T00:00:00Z
JUNE_1 = 1748736000
HOUR = 3600
DAY = 86400


def load_fixture_text(name: str) -> str:
    return (FIXTURE_DIR / name).read_text()


def make_current(
    name: str = "London",
    country: str = "GB",
    lat: float | None = 51.51,
    lon: float | None = -0.13,
    temp: float = 17.4,
) -> dict:
    payload: dict = {
        "weather": [{"description": "broken clouds", "icon": "04d"}],
        "main": {"temp": temp, "feels_like": temp - 0.5, "pressure": 1014, "humidity": 68},
        "visibility": 10000,
        "wind": {"speed": 4.6, "deg": 250},
        "dt": JUNE_1 + 12 * HOUR,
        "sys": {"country": country, "sunrise": JUNE_1 + 4 * HOUR, "sunset": JUNE_1 + 20 * HOUR},
        "timezone": 3600,
        "name": name,
    }
    if lat is not None and lon is not None:
        payload["coord"] = {"lat": lat, "lon": lon}
    return payload


def make_sample(
    dt: int | None,
    temp_min: float | None,
    temp_max: float | None,
    description: str = "clear sky",
    icon: str = "01d",
) -> dict:
    sample: dict = {
        "main": {"temp_min": temp_min, "temp_max": temp_max},
        "weather": [{"description": description, "icon": icon}],
    }
    if dt is not None:
        sample["dt"] = dt
    return sample


def make_forecast(samples: list[dict], timezone: int = 0) -> dict:
    return {"cnt": len(samples), "list": samples, "city": {"name": "London", "timezone": timezone}}


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def current_text() -> str:
    return load_fixture_text("owm_current_london.json")


@pytest.fixture
def forecast_text() -> str:
    return load_fixture_text("owm_forecast_london.json")


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Config pointing at a temp data dir, with background warming off."""
    return AppConfig(
        cache={"data_dir": str(tmp_path / "data")},
        sync=SyncConfig(default_location="London", warm_favorites=False, warm_delay_ms=0),
    )


@pytest.fixture
def cache(tmp_path: Path) -> LocalCacheStore:
    return LocalCacheStore(tmp_path / "data")


@pytest.fixture
def store() -> WeatherStateStore:
    return WeatherStateStore()


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "api": {"api_key": "test-key", "timeout": 10.0},
        "sync": {"default_location": "Paris", "warm_favorites": False},
        "settings": {"unit": "F"},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


def dumps(payload: dict) -> str:
    return json.dumps(payload)
