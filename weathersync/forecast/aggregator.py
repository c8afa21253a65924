"""Forecast aggregation: 3-hour samples -> per-day summaries.

Samples are bucketed by their local calendar date (timestamp + UTC offset).
Each day reports the lowest temp_min and highest temp_max of its samples, the
most frequent condition (ties go to the one seen first) and the icon of the
first sample between 11:00 and 15:00 local time, or of the first sample when
none falls in that window. At most MAX_DAYS days, earliest first.
"""

import json
import logging
import math
from collections import Counter
from datetime import date

from weathersync.forecast.timefmt import (
    NOT_AVAILABLE,
    format_date_label,
    format_day_of_week,
    format_display_date,
    local_hour,
)
from weathersync.models.common import Payload, TemperatureUnit
from weathersync.models.weather import DailyForecastSummary, ForecastResult, ForecastSample

logger = logging.getLogger(__name__)

MAX_DAYS = 5
MIDDAY_HOURS = range(11, 16)
DEFAULT_ICON = "01d"
LIST_MISSING_ERROR = "Forecast list missing"


def aggregate(
    raw: str | Payload | None,
    unit: TemperatureUnit | str = TemperatureUnit.CELSIUS,
    utc_offset: int | None = None,
) -> ForecastResult:
    """Aggregate a raw forecast payload into daily summaries.

    Returns a ForecastResult carrying an error instead of summaries when the
    payload cannot be decoded or has no sample list.
    """
    unit = TemperatureUnit.parse(unit)

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            logger.error("Error parsing forecast: %s", e)
            return ForecastResult(error=f"Error parsing forecast: {e}")
    if not isinstance(raw, dict):
        return ForecastResult(error=LIST_MISSING_ERROR)

    samples = parse_samples(raw)
    if not samples:
        return ForecastResult(error=LIST_MISSING_ERROR)

    if utc_offset is None:
        utc_offset = _payload_offset(raw)

    buckets: dict[str, list[ForecastSample]] = {}
    for sample in samples:
        label = format_date_label(sample.timestamp, utc_offset)
        buckets.setdefault(label, []).append(sample)

    ordered = sorted(buckets, key=_date_sort_key)
    summaries = tuple(
        _summarize(label, buckets[label], unit, utc_offset) for label in ordered[:MAX_DAYS]
    )
    return ForecastResult(summaries=summaries)


def parse_samples(raw: Payload) -> list[ForecastSample]:
    """Extract forecast samples from the payload's `list`, in payload order."""
    entries = raw.get("list")
    if not isinstance(entries, list):
        return []

    samples: list[ForecastSample] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        main = entry.get("main") or {}
        weather = (entry.get("weather") or [{}])[0] or {}
        samples.append(
            ForecastSample(
                timestamp=_opt_int(entry.get("dt")),
                temp_min=_opt_float(main.get("temp_min")),
                temp_max=_opt_float(main.get("temp_max")),
                condition=str(weather.get("description") or NOT_AVAILABLE),
                icon=str(weather.get("icon") or ""),
            )
        )
    return samples


def _summarize(
    label: str,
    day: list[ForecastSample],
    unit: TemperatureUnit,
    utc_offset: int,
) -> DailyForecastSummary:
    mins = [s.temp_min for s in day if s.temp_min is not None]
    maxs = [s.temp_max for s in day if s.temp_max is not None]

    # Counter keeps insertion order, so max() resolves ties to the first seen.
    counts = Counter(s.condition for s in day)
    condition = max(counts, key=counts.__getitem__)

    midday = next(
        (s for s in day if local_hour(s.timestamp, utc_offset) in MIDDAY_HOURS),
        day[0],
    )
    icon = midday.icon or day[0].icon or DEFAULT_ICON

    first = day[0]
    return DailyForecastSummary(
        date_label=label,
        display_date=format_display_date(first.timestamp, utc_offset),
        day_of_week=format_day_of_week(first.timestamp, utc_offset),
        min_temp=min(mins) if mins else None,
        max_temp=max(maxs) if maxs else None,
        condition=condition,
        icon=icon,
        sample_count=len(day),
        unit=unit,
    )


def _date_sort_key(label: str) -> date:
    """Labels that do not parse sort first, they are never dropped."""
    if label == NOT_AVAILABLE:
        return date.min
    try:
        return date.fromisoformat(label)
    except ValueError:
        return date.min


def _payload_offset(raw: Payload) -> int:
    city = raw.get("city") or {}
    return _opt_int(city.get("timezone")) or 0


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
