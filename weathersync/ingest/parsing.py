"""Decoding and shape checks for raw current-weather payloads."""

import json
import math

from weathersync.errors import PayloadParseError
from weathersync.models.common import Payload
from weathersync.models.weather import CurrentWeatherSnapshot


def decode_payload(text: str) -> Payload:
    """Decode a raw response body into a JSON object."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise PayloadParseError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise PayloadParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def display_name(payload: Payload) -> str:
    """Location name with the country code appended unless already present."""
    name = str(payload.get("name") or "N/A")
    country = str((payload.get("sys") or {}).get("country") or "")
    if not country or country in name:
        return name
    return f"{name}, {country}"


def extract_coordinates(payload: Payload) -> tuple[float, float]:
    coord = payload.get("coord")
    if not isinstance(coord, dict):
        raise PayloadParseError("Coordinates not found.")
    try:
        lat, lon = float(coord["lat"]), float(coord["lon"])
    except (KeyError, TypeError, ValueError) as e:
        raise PayloadParseError(f"Coordinates not found: {e}") from e
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise PayloadParseError("Coordinates not found: non-finite value")
    return lat, lon


def parse_current(payload: Payload) -> CurrentWeatherSnapshot:
    lat, lon = extract_coordinates(payload)
    main = payload.get("main") or {}
    wind = payload.get("wind") or {}
    sys_ = payload.get("sys") or {}
    weather = (payload.get("weather") or [{}])[0] or {}

    return CurrentWeatherSnapshot(
        location_name=display_name(payload),
        lat=lat,
        lon=lon,
        observed_at=_opt_int(payload.get("dt")) or 0,
        utc_offset=_opt_int(payload.get("timezone")) or 0,
        temperature=_opt_float(main.get("temp")),
        feels_like=_opt_float(main.get("feels_like")),
        pressure=_opt_int(main.get("pressure")),
        humidity=_opt_int(main.get("humidity")),
        visibility=_opt_int(payload.get("visibility")),
        wind_speed=_opt_float(wind.get("speed")),
        wind_deg=_opt_float(wind.get("deg")) or 0.0,
        sunrise=_opt_int(sys_.get("sunrise")) or 0,
        sunset=_opt_int(sys_.get("sunset")) or 0,
        condition_code=str(weather.get("icon") or ""),
        condition=str(weather.get("description") or "N/A"),
    )


def _opt_float(value: object) -> float | None:
    """Finite float or None. JSON NaN and Infinity count as missing."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _opt_int(value: object) -> int | None:
    number = _opt_float(value)
    return None if number is None else int(number)
