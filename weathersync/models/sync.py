"""Synchronization cycle state and user-facing notices."""

from dataclasses import dataclass
from enum import StrEnum

from weathersync.models.common import TemperatureUnit


class FetchPhase(StrEnum):
    IDLE = "idle"
    LOADING_CURRENT = "loading_current"
    LOADING_FORECAST = "loading_forecast"
    READY = "ready"
    ERROR_CURRENT = "error_current"
    ERROR_FORECAST = "error_forecast"


@dataclass
class SyncState:
    location: str = ""
    display_name: str | None = None
    phase: FetchPhase = FetchPhase.IDLE
    current_error: str | None = None
    forecast_error: str | None = None
    offline: bool = False  # serving cached data
    stale: bool = False  # last background refresh failed
    showing_cached_for: str | None = None
    generation: int = 0
    data_unit: TemperatureUnit | None = None  # unit the published payloads were fetched in

    @property
    def is_loading(self) -> bool:
        return self.phase in (FetchPhase.LOADING_CURRENT, FetchPhase.LOADING_FORECAST)

    def as_dict(self) -> dict:
        return {
            "location": self.location,
            "display_name": self.display_name,
            "phase": self.phase.value,
            "current_error": self.current_error,
            "forecast_error": self.forecast_error,
            "offline": self.offline,
            "stale": self.stale,
            "showing_cached_for": self.showing_cached_for,
            "generation": self.generation,
            "data_unit": self.data_unit.value if self.data_unit else None,
        }


@dataclass(frozen=True)
class Notice:
    message: str
    blocking: bool = False
