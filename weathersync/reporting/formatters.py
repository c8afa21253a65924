"""Plain-text renderers for current weather, daily forecasts and sync state."""

from weathersync.forecast.timefmt import format_time, wind_degree_to_cardinal
from weathersync.models.common import TemperatureUnit
from weathersync.models.sync import SyncState
from weathersync.models.weather import CurrentWeatherSnapshot, DailyForecastSummary, ForecastResult


def format_temperature(value: float | None, unit: TemperatureUnit) -> str:
    if value is None:
        return "N/A"
    return f"{round(value)}°{unit.value}"


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def format_current_text(s: CurrentWeatherSnapshot, unit: TemperatureUnit) -> str:
    visibility = "N/A" if s.visibility is None else f"{s.visibility / 1000:.1f} km"
    wind_speed = "N/A" if s.wind_speed is None else f"{s.wind_speed:.1f} {unit.wind_speed_label}"
    lines = [
        f"=== Current Weather - {s.location_name} ===",
        f"{format_temperature(s.temperature, unit)} {capitalize_first(s.condition)} "
        f"(feels like {format_temperature(s.feels_like, unit)})",
        f"Time: {format_time(s.observed_at, s.utc_offset, '%a, %b %d, %H:%M')}",
        f"Coordinates: Lat: {s.lat:.2f}, Lon: {s.lon:.2f}",
        f"Pressure: {'N/A' if s.pressure is None else s.pressure} hPa",
        f"Humidity: {'N/A' if s.humidity is None else s.humidity}%",
        f"Wind: {wind_speed}, {wind_degree_to_cardinal(s.wind_deg)}",
        f"Visibility: {visibility}",
        f"Sunrise: {format_time(s.sunrise, s.utc_offset)} | "
        f"Sunset: {format_time(s.sunset, s.utc_offset)}",
    ]
    return "\n".join(lines)


def format_day_line(d: DailyForecastSummary) -> str:
    return (
        f"{d.day_of_week} {d.display_date}  "
        f"{capitalize_first(d.condition):<24} "
        f"{format_temperature(d.max_temp, d.unit)} / {format_temperature(d.min_temp, d.unit)}"
    )


def format_forecast_text(result: ForecastResult) -> str:
    lines = ["=== 5-Day Forecast ==="]
    if result.error is not None:
        lines.append(f"Error: {result.error}")
    elif not result.summaries:
        lines.append("No forecast data available.")
    else:
        lines.extend(format_day_line(d) for d in result.summaries)
    return "\n".join(lines)


def format_state_line(state: SyncState) -> str:
    parts = [f"Status: {state.phase.value}"]
    if state.offline and state.showing_cached_for:
        parts.append(f"offline, showing last known data for {state.showing_cached_for}")
    if state.stale:
        parts.append("stale")
    if state.current_error:
        parts.append(f"error: {state.current_error}")
    elif state.forecast_error:
        parts.append(f"forecast error: {state.forecast_error}")
    return " | ".join(parts)
