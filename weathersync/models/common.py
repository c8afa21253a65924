"""Common types and helpers shared across models."""

from enum import StrEnum
from typing import TypeAlias

Payload: TypeAlias = dict


class DataKind(StrEnum):
    CURRENT = "current"
    FORECAST = "forecast"


class TemperatureUnit(StrEnum):
    CELSIUS = "C"
    FAHRENHEIT = "F"
    KELVIN = "K"

    @classmethod
    def parse(cls, value: "str | TemperatureUnit | None") -> "TemperatureUnit":
        """Accept 'C', '°C', 'metric' and friends. Anything unknown is Kelvin."""
        if isinstance(value, TemperatureUnit):
            return value
        text = (value or "").strip().lstrip("°").upper()
        aliases = {
            "C": cls.CELSIUS,
            "METRIC": cls.CELSIUS,
            "F": cls.FAHRENHEIT,
            "IMPERIAL": cls.FAHRENHEIT,
        }
        return aliases.get(text, cls.KELVIN)

    @property
    def units_param(self) -> str:
        if self is TemperatureUnit.CELSIUS:
            return "metric"
        if self is TemperatureUnit.FAHRENHEIT:
            return "imperial"
        return "standard"

    @property
    def wind_speed_label(self) -> str:
        return "mph" if self is TemperatureUnit.FAHRENHEIT else "m/s"
