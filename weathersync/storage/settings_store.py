"""User settings: auto-refresh interval and unit preference, persisted as YAML."""

import logging
from collections.abc import Callable
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from weathersync.models.common import TemperatureUnit

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.yaml"

UnitObserver = Callable[[TemperatureUnit], None]


class UserSettings(BaseModel):
    model_config = {"extra": "ignore"}

    refresh_interval_minutes: int = Field(default=0, ge=0)
    unit: TemperatureUnit = TemperatureUnit.CELSIUS


class SettingsStore:
    def __init__(self, path: str | Path, defaults: UserSettings | None = None):
        self.path = Path(path)
        self.defaults = defaults or UserSettings()
        self._unit_observers: list[UnitObserver] = []

    def load(self) -> UserSettings:
        if not self.path.exists():
            return self.defaults.model_copy()
        try:
            with open(self.path) as f:
                raw = yaml.safe_load(f) or {}
            return UserSettings(**{**self.defaults.model_dump(), **raw})
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            logger.warning("Unreadable settings at %s, using defaults: %s", self.path, e)
            return self.defaults.model_copy()

    def save(self, settings: UserSettings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(settings.model_dump(mode="json"), f, sort_keys=False)
        except OSError:
            logger.exception("Error saving settings to %s", self.path)

    def load_refresh_interval(self) -> int:
        return self.load().refresh_interval_minutes

    def save_refresh_interval(self, minutes: int) -> None:
        settings = self.load().model_copy(update={"refresh_interval_minutes": minutes})
        # Re-validate so negative intervals are rejected
        self.save(UserSettings(**settings.model_dump()))

    def load_unit(self) -> TemperatureUnit:
        return self.load().unit

    def save_unit(self, unit: TemperatureUnit | str) -> None:
        """Persist the unit and notify observers when it actually changed."""
        new_unit = TemperatureUnit.parse(unit)
        settings = self.load()
        old_unit = settings.unit
        self.save(settings.model_copy(update={"unit": new_unit}))
        if new_unit != old_unit:
            for observer in list(self._unit_observers):
                observer(new_unit)

    def subscribe_unit(self, observer: UnitObserver) -> None:
        if observer not in self._unit_observers:
            self._unit_observers.append(observer)

    def unsubscribe_unit(self, observer: UnitObserver) -> None:
        if observer in self._unit_observers:
            self._unit_observers.remove(observer)
