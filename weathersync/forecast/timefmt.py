"""Local-time labels for epoch timestamps shifted by a location's UTC offset."""

from datetime import UTC, datetime, timedelta

NOT_AVAILABLE = "N/A"

_CARDINALS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]


def to_local(timestamp: int, utc_offset: int) -> datetime:
    """Naive-looking UTC datetime carrying the location's wall-clock time."""
    return datetime.fromtimestamp(timestamp, UTC) + timedelta(seconds=utc_offset)


def format_time(timestamp: int | None, utc_offset: int, fmt: str = "%H:%M") -> str:
    try:
        return to_local(int(timestamp), utc_offset).strftime(fmt)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError, OSError):
        return NOT_AVAILABLE


def format_date_label(timestamp: int | None, utc_offset: int) -> str:
    return format_time(timestamp, utc_offset, "%Y-%m-%d")


def format_display_date(timestamp: int | None, utc_offset: int) -> str:
    return format_time(timestamp, utc_offset, "%b %d")


def format_day_of_week(timestamp: int | None, utc_offset: int) -> str:
    return format_time(timestamp, utc_offset, "%a")


def local_hour(timestamp: int | None, utc_offset: int) -> int | None:
    try:
        return to_local(int(timestamp), utc_offset).hour  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def wind_degree_to_cardinal(degree: float) -> str:
    return _CARDINALS[round((degree % 360) / 22.5) % 16]
