"""Background pre-fetch of favorite locations into the local cache."""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from weathersync.errors import FetchError, PayloadParseError
from weathersync.ingest.connectivity import ConnectivityChecker
from weathersync.ingest.openweather_client import OpenWeatherClient
from weathersync.ingest.parsing import decode_payload, extract_coordinates
from weathersync.models.common import TemperatureUnit
from weathersync.storage.cache_store import LocalCacheStore

logger = logging.getLogger(__name__)


@dataclass
class WarmSummary:
    warmed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class CacheWarmer:
    def __init__(
        self,
        client: OpenWeatherClient,
        cache: LocalCacheStore,
        connectivity: ConnectivityChecker,
        unit_provider: Callable[[], TemperatureUnit],
        delay_seconds: float = 1.0,
    ):
        self.client = client
        self.cache = cache
        self.connectivity = connectivity
        self.unit_provider = unit_provider
        self.delay_seconds = delay_seconds

    def warm(self, locations: Iterable[str], exclude: str | None = None) -> WarmSummary:
        """Fetch and cache current+forecast for each location, one at a time.

        Failures are logged and never raised. Stops when the network goes away.
        """
        summary = WarmSummary()
        pending = [
            loc for loc in locations
            if loc.strip() and (exclude is None or loc.casefold() != exclude.casefold())
        ]
        for index, location in enumerate(pending):
            if index > 0 and self.delay_seconds > 0:
                time.sleep(self.delay_seconds)
            if not self.connectivity.is_available():
                logger.info("Cache warming stopped, network unavailable")
                summary.skipped.extend(pending[index:])
                break
            if self._warm_one(location):
                summary.warmed.append(location)
            else:
                summary.failed.append(location)

        logger.info(
            "Cache warming done: %d warmed, %d failed, %d skipped",
            len(summary.warmed), len(summary.failed), len(summary.skipped),
        )
        return summary

    def _warm_one(self, location: str) -> bool:
        unit = self.unit_provider()
        try:
            current_text = self.client.fetch_current(location, unit)
            lat, lon = extract_coordinates(decode_payload(current_text))
            forecast_text = self.client.fetch_forecast(lat, lon, unit)
            decode_payload(forecast_text)
        except (FetchError, PayloadParseError) as e:
            logger.warning("Cache warming failed for %s: %s", location, e)
            return False
        except Exception:
            logger.exception("Cache warming crashed for %s", location)
            return False

        self.cache.save_current(location, current_text)
        self.cache.save_forecast(location, forecast_text)
        self.cache.save_unit(location, unit)
        logger.debug("Warmed cache for %s", location)
        return True
