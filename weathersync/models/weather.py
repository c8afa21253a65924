"""Current weather and forecast data models."""

from dataclasses import dataclass, field

from weathersync.models.common import TemperatureUnit


@dataclass(frozen=True)
class CurrentWeatherSnapshot:
    location_name: str
    lat: float
    lon: float
    observed_at: int  # epoch seconds
    utc_offset: int  # seconds east of UTC
    temperature: float | None
    feels_like: float | None
    pressure: int | None
    humidity: int | None
    visibility: int | None  # metres
    wind_speed: float | None
    wind_deg: float
    sunrise: int
    sunset: int
    condition_code: str
    condition: str


@dataclass(frozen=True)
class ForecastSample:
    timestamp: int | None
    temp_min: float | None
    temp_max: float | None
    condition: str
    icon: str


@dataclass(frozen=True)
class DailyForecastSummary:
    date_label: str  # YYYY-MM-DD, local to the forecast location
    display_date: str  # e.g. "Jun 01"
    day_of_week: str  # e.g. "Sun"
    min_temp: float | None
    max_temp: float | None
    condition: str
    icon: str
    sample_count: int
    unit: TemperatureUnit = TemperatureUnit.CELSIUS


@dataclass(frozen=True)
class ForecastResult:
    summaries: tuple[DailyForecastSummary, ...] = field(default_factory=tuple)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
