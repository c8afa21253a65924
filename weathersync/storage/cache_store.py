"""File-backed cache of raw weather payloads, favorites and the last viewed location.

Failures never propagate. Payload loads return a CacheRead that tells a miss
from an unreadable file; saves return False when the write failed. Favorites
and the last viewed location degrade to "nothing saved". All failures are logged.
"""

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from urllib.parse import quote_plus

from weathersync.models.common import TemperatureUnit

logger = logging.getLogger(__name__)

CURRENT_SUFFIX = "_current.json"
FORECAST_SUFFIX = "_forecast.json"
UNIT_SUFFIX = "_unit.txt"
LAST_LOCATION_FILENAME = "last_location.txt"
FAVORITES_FILENAME = "favorites.json"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9,_-]")


class CacheStatus(StrEnum):
    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


@dataclass(frozen=True)
class CacheRead:
    status: CacheStatus
    text: str | None = None
    error: str | None = None

    @property
    def hit(self) -> bool:
        return self.status == CacheStatus.HIT


def sanitize_location_key(location: str) -> str:
    """Filesystem-safe key for a location string.

    Distinct inputs that differ only in replaced characters ("New York" and
    "New-York" do not, "New York" and "New_York" do) share a key.
    """
    return quote_plus(_UNSAFE_CHARS.sub("_", location))


class LocalCacheStore:
    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    # --- Weather payloads ---

    def current_path(self, location: str) -> Path:
        return self.base_dir / (sanitize_location_key(location) + CURRENT_SUFFIX)

    def forecast_path(self, location: str) -> Path:
        return self.base_dir / (sanitize_location_key(location) + FORECAST_SUFFIX)

    def save_current(self, location: str, payload: str) -> bool:
        return self._write(self.current_path(location), payload, f"current weather for {location}")

    def load_current(self, location: str) -> CacheRead:
        return self._read(self.current_path(location), f"current weather for {location}")

    def save_forecast(self, location: str, payload: str) -> bool:
        return self._write(self.forecast_path(location), payload, f"forecast for {location}")

    def load_forecast(self, location: str) -> CacheRead:
        return self._read(self.forecast_path(location), f"forecast for {location}")

    def unit_path(self, location: str) -> Path:
        return self.base_dir / (sanitize_location_key(location) + UNIT_SUFFIX)

    def save_unit(self, location: str, unit: TemperatureUnit) -> bool:
        """Record the unit the cached payloads for a location were fetched in."""
        return self._write(self.unit_path(location), unit.value, f"unit for {location}")

    def load_unit(self, location: str) -> TemperatureUnit | None:
        text = self._read(self.unit_path(location), f"unit for {location}").text
        return TemperatureUnit.parse(text) if text else None

    def delete_for(self, location: str) -> None:
        """Remove the cached payloads and their unit for a location."""
        for path in (
            self.current_path(location),
            self.forecast_path(location),
            self.unit_path(location),
        ):
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.exception("Error deleting %s", path)
        logger.debug("Deleted cached weather data for %s", location)

    # --- Favorites ---

    def save_favorites(self, favorites: list[str]) -> bool:
        return self._write(
            self.base_dir / FAVORITES_FILENAME,
            json.dumps(list(favorites), ensure_ascii=False),
            "favorites",
        )

    def load_favorites(self) -> list[str]:
        text = self._read(self.base_dir / FAVORITES_FILENAME, "favorites").text
        if text is None:
            return []
        try:
            data = json.loads(text)
        except ValueError:
            logger.exception("Error decoding favorites")
            return []
        if not isinstance(data, list):
            logger.error("Favorites file does not hold a list, ignoring")
            return []
        return [str(item) for item in data]

    # --- Last viewed location ---

    def save_last_viewed_location(self, location: str) -> bool:
        return self._write(
            self.base_dir / LAST_LOCATION_FILENAME, location, "last viewed location"
        )

    def load_last_viewed_location(self) -> str | None:
        text = self._read(self.base_dir / LAST_LOCATION_FILENAME, "last viewed location").text
        return text or None

    # --- Internals ---

    def _write(self, path: Path, text: str, what: str) -> bool:
        """Write via a temporary sibling and os.replace, so readers never see partial files."""
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=path.suffix)
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp_name, path)
            tmp_name = None
            logger.debug("Saved %s to %s", what, path.name)
            return True
        except OSError:
            logger.exception("Error saving %s", what)
            return False
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def _read(self, path: Path, what: str) -> CacheRead:
        try:
            if not path.exists():
                logger.debug("No saved %s (%s)", what, path.name)
                return CacheRead(CacheStatus.MISS)
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
            logger.debug("Loaded %s from %s", what, path.name)
            return CacheRead(CacheStatus.HIT, text)
        except (OSError, UnicodeDecodeError) as e:
            logger.exception("Error loading %s", what)
            return CacheRead(CacheStatus.ERROR, error=str(e))
