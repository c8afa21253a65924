"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

from weathersync.config.defaults import DEFAULT_LOCATION
from weathersync.models.common import TemperatureUnit


class ApiConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.openweathermap.org"
    api_key: str = ""
    timeout: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    retry_base_delay: float = Field(default=2.0, ge=0.0)


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid"}

    data_dir: str = "data"


class SyncConfig(BaseModel):
    model_config = {"extra": "forbid"}

    default_location: str = DEFAULT_LOCATION
    warm_favorites: bool = True
    warm_delay_ms: int = Field(default=1000, ge=0)
    connectivity_url: str = ""  # empty means the api base_url
    connectivity_timeout: float = Field(default=5.0, gt=0.0)


class SettingsDefaults(BaseModel):
    model_config = {"extra": "forbid"}

    refresh_interval_minutes: int = Field(default=0, ge=0)
    unit: TemperatureUnit = TemperatureUnit.CELSIUS


class AppConfig(BaseModel):
    model_config = {"extra": "forbid"}

    api: ApiConfig = ApiConfig()
    cache: CacheConfig = CacheConfig()
    sync: SyncConfig = SyncConfig()
    settings: SettingsDefaults = SettingsDefaults()
