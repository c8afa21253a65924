"""Synchronization coordinator: network vs. cache, two-stage fetch, offline fallback.

A refresh cycle walks Idle -> Loading(current) -> Loading(forecast) and ends in
Ready, Error(current) or Error(forecast). The current-weather response supplies
the coordinates for the forecast request, so a current-weather failure also
fails the forecast ("dependency error") and falls back to cached data.

Every refresh takes a new generation number. Results belonging to an older
generation are dropped before they reach the cache, the store or the state, so
a slow response can never overwrite a newer one.
"""

import logging
import threading
from collections.abc import Callable

from weathersync.config.schema import AppConfig
from weathersync.errors import FetchError, PayloadParseError
from weathersync.ingest.connectivity import ConnectivityChecker
from weathersync.ingest.openweather_client import OpenWeatherClient
from weathersync.ingest.parsing import decode_payload, display_name, extract_coordinates
from weathersync.models.common import Payload, TemperatureUnit
from weathersync.models.sync import FetchPhase, Notice, SyncState
from weathersync.storage.cache_store import (
    CacheRead,
    CacheStatus,
    LocalCacheStore,
    sanitize_location_key,
)
from weathersync.store.weather_state import WeatherStateStore
from weathersync.sync.cache_warmer import CacheWarmer

logger = logging.getLogger(__name__)

NO_LOCATION_MESSAGE = "Please enter a location."
NETWORK_UNAVAILABLE_MESSAGE = "Network is unavailable."
REFRESHED_MESSAGE = "Weather data refreshed!"

Notifier = Callable[[Notice], None]


def _log_notice(notice: Notice) -> None:
    logger.info("Notice%s: %s", " (blocking)" if notice.blocking else "", notice.message)


class SyncCoordinator:
    def __init__(
        self,
        client: OpenWeatherClient,
        cache: LocalCacheStore,
        store: WeatherStateStore,
        connectivity: ConnectivityChecker,
        config: AppConfig,
        notify: Notifier | None = None,
    ):
        self.client = client
        self.cache = cache
        self.store = store
        self.connectivity = connectivity
        self.config = config
        self.notify = notify or _log_notice

        self._lock = threading.RLock()
        self._generation = 0
        self._state = SyncState()
        self._unit = config.settings.unit
        self._had_success = False
        self._warm_thread: threading.Thread | None = None
        self.warmer = CacheWarmer(
            client,
            cache,
            connectivity,
            unit_provider=lambda: self._unit,
            delay_seconds=config.sync.warm_delay_ms / 1000,
        )

    @property
    def state(self) -> SyncState:
        with self._lock:
            return SyncState(**vars(self._state))

    @property
    def unit(self) -> TemperatureUnit:
        return self._unit

    @property
    def data_unit(self) -> TemperatureUnit:
        """Unit of the payloads last published, which labels what the view shows."""
        with self._lock:
            return self._state.data_unit or self._unit

    # --- Refresh cycle ---

    def refresh(
        self,
        location: str,
        unit: TemperatureUnit | str | None = None,
        user_initiated: bool = False,
    ) -> SyncState:
        """Run one fetch cycle for a location. Never raises for fetch/parse failures."""
        location = (location or "").strip()
        unit = TemperatureUnit.parse(unit) if unit is not None else self._unit
        generation = self._begin(location, unit)
        logger.info(
            "Fetching weather for %r unit=%s user_initiated=%s (generation %d)",
            location, unit.value, user_initiated, generation,
        )

        if not location:
            self._fail_current(generation, NO_LOCATION_MESSAGE, user_initiated, recover=False)
            return self.state

        if not self.connectivity.is_available():
            logger.info("Network unavailable, serving cached data for %r", location)
            self._serve_offline(generation, location, user_initiated)
            return self.state

        # Stage 1: current weather
        try:
            current_text = self.client.fetch_current(location, unit)
            current = decode_payload(current_text)
            lat, lon = extract_coordinates(current)
        except PayloadParseError as e:
            logger.error("Error parsing current weather for %r: %s", location, e)
            self._fail_current(generation, f"Error parsing current weather: {e}", user_initiated)
            return self.state
        except FetchError as e:
            logger.error("Failed to fetch current weather for %r: %s", location, e)
            self._fail_current(generation, f"API Error: {e}", user_initiated)
            return self.state

        if not self._commit_current(generation, location, current_text, current):
            return self.state

        # Stage 2: forecast, keyed by the coordinates from stage 1
        try:
            forecast_text = self.client.fetch_forecast(lat, lon, unit)
            forecast = decode_payload(forecast_text)
        except PayloadParseError as e:
            logger.error("Error parsing forecast for %r: %s", location, e)
            self._fail_forecast(generation, f"Error parsing forecast: {e}", user_initiated)
            return self.state
        except FetchError as e:
            logger.error("Failed to fetch forecast for %r: %s", location, e)
            self._fail_forecast(generation, f"API Error (Forecast): {e}", user_initiated)
            return self.state

        if not self._commit_forecast(generation, location, forecast_text, forecast):
            return self.state

        if user_initiated:
            self.notify(Notice(REFRESHED_MESSAGE))
        self._after_success()
        return self.state

    def load_offline(self, location: str, announce: bool = True) -> bool:
        """Serve cached data without touching the network.

        Falls back to the first favorite and then the default location.
        Returns True when some cached data was published.
        """
        location = (location or "").strip()
        generation = self._begin(location, self._unit)
        loaded = self._recover(generation, location, announce)
        with self._lock:
            if self._is_active(generation):
                if loaded is not None:
                    self._state.phase = FetchPhase.READY
                else:
                    self._state.phase = FetchPhase.ERROR_CURRENT
                    self._state.current_error = f"No cached data for {location}"
                    self._state.forecast_error = f"Dependency error: No cached data for {location}"
        return loaded is not None

    # --- Cache warming ---

    def start_cache_warming(self, exclude: str | None = None) -> threading.Thread | None:
        """Pre-fetch every favorite on a background thread. Returns the thread."""
        favorites = self.cache.load_favorites()
        if not favorites:
            return None
        if self._warm_thread is not None and self._warm_thread.is_alive():
            logger.debug("Cache warming already running")
            return self._warm_thread
        thread = threading.Thread(
            target=self.warmer.warm,
            args=(favorites,),
            kwargs={"exclude": exclude},
            name="cache-warmer",
            daemon=True,
        )
        thread.start()
        self._warm_thread = thread
        return thread

    def wait_for_cache_warming(self, timeout: float | None = None) -> None:
        if self._warm_thread is not None:
            self._warm_thread.join(timeout)

    # --- Internals ---

    def _begin(self, location: str, unit: TemperatureUnit) -> int:
        with self._lock:
            self._generation += 1
            self._unit = unit
            self._state = SyncState(
                location=location,
                phase=FetchPhase.LOADING_CURRENT,
                stale=self._state.stale,
                generation=self._generation,
                data_unit=self._state.data_unit,
            )
            return self._generation

    def _is_active(self, generation: int) -> bool:
        if generation != self._generation:
            logger.info(
                "Discarding result of superseded fetch (generation %d, active %d)",
                generation, self._generation,
            )
            return False
        return True

    def _cache_keys(self, location: str, canonical: str) -> list[str]:
        keys = [location]
        if sanitize_location_key(canonical) != sanitize_location_key(location):
            keys.append(canonical)
        return keys

    def _commit_current(
        self, generation: int, location: str, text: str, payload: Payload
    ) -> bool:
        canonical = display_name(payload)
        with self._lock:
            if not self._is_active(generation):
                return False
            for key in self._cache_keys(location, canonical):
                self.cache.save_current(key, text)
                self.cache.save_unit(key, self._unit)
            self.cache.save_last_viewed_location(location)
            self._state.display_name = canonical
            self._state.phase = FetchPhase.LOADING_FORECAST
            self._state.data_unit = self._unit
            self.store.publish_current(payload)
            return True

    def _commit_forecast(
        self, generation: int, location: str, text: str, payload: Payload
    ) -> bool:
        with self._lock:
            if not self._is_active(generation):
                return False
            canonical = self._state.display_name or location
            for key in self._cache_keys(location, canonical):
                self.cache.save_forecast(key, text)
            self._state.phase = FetchPhase.READY
            self._state.stale = False
            self._state.offline = False
            self.store.publish_forecast(payload)
            return True

    def _fail_current(
        self, generation: int, message: str, user_initiated: bool, recover: bool = True
    ) -> None:
        with self._lock:
            if not self._is_active(generation):
                return
            self._state.phase = FetchPhase.ERROR_CURRENT
            self._state.current_error = message
            self._state.forecast_error = f"Dependency error: {message}"
            if not user_initiated:
                self._state.stale = True
            location = self._state.location
        if user_initiated:
            self.notify(Notice(message, blocking=True))
        if recover:
            self._recover(generation, location, announce=False)

    def _fail_forecast(self, generation: int, message: str, user_initiated: bool) -> None:
        with self._lock:
            if not self._is_active(generation):
                return
            self._state.phase = FetchPhase.ERROR_FORECAST
            self._state.forecast_error = message
            if not user_initiated:
                self._state.stale = True
        if user_initiated:
            self.notify(Notice(message, blocking=True))

    def _serve_offline(self, generation: int, location: str, user_initiated: bool) -> None:
        loaded = self._recover(generation, location, announce=user_initiated)
        with self._lock:
            if not self._is_active(generation):
                return
            if loaded is not None:
                self._state.phase = FetchPhase.READY
            else:
                self._state.phase = FetchPhase.ERROR_CURRENT
                self._state.current_error = NETWORK_UNAVAILABLE_MESSAGE
                self._state.forecast_error = f"Dependency error: {NETWORK_UNAVAILABLE_MESSAGE}"
            if not user_initiated:
                self._state.stale = True
        if user_initiated:
            message = NETWORK_UNAVAILABLE_MESSAGE
            if loaded is not None:
                message += f" Showing last known data for {loaded}."
            self.notify(Notice(message, blocking=True))

    def _recover(self, generation: int, location: str, announce: bool) -> str | None:
        """Offline path: requested location, then first favorite, then the default.

        Only the requested location may announce a cache miss. Returns the
        location whose cached data was published, or None.
        """
        candidates = [location]
        favorites = self.cache.load_favorites()
        if favorites:
            candidates.append(favorites[0])
        candidates.append(self.config.sync.default_location)

        tried: set[str] = set()
        for index, candidate in enumerate(candidates):
            candidate = (candidate or "").strip()
            if not candidate:
                continue
            key = sanitize_location_key(candidate)
            if key in tried:
                continue
            tried.add(key)
            if self._load_cached(generation, candidate, announce=announce and index == 0):
                return candidate
            if generation != self._generation:
                return None
        return None

    def _load_cached(self, generation: int, location: str, announce: bool) -> bool:
        current = self._decode_cached(self.cache.load_current(location), "current weather", location)
        forecast = self._decode_cached(self.cache.load_forecast(location), "forecast", location)
        unit = self.cache.load_unit(location)
        if current is None and forecast is None:
            logger.info("No cached data for %r", location)
            if announce:
                self.notify(Notice(f"No cached data for {location}", blocking=True))
            return False

        with self._lock:
            if not self._is_active(generation):
                return False
            self._state.offline = True
            self._state.showing_cached_for = location
            if unit is None:
                logger.debug("No unit recorded for cached %r, assuming %s", location, self._unit.value)
            self._state.data_unit = unit or self._unit
            if current is not None:
                self._state.display_name = display_name(current)
                self.store.publish_current(current)
            if forecast is not None:
                self.store.publish_forecast(forecast)
        logger.info("Loaded cached data for %r", location)
        return True

    def _decode_cached(self, read: CacheRead, what: str, location: str) -> Payload | None:
        if read.status == CacheStatus.ERROR:
            logger.warning(
                "Cached %s for %r is unreadable, treating as missing: %s", what, location, read.error
            )
            return None
        if not read.hit:
            return None
        try:
            return decode_payload(read.text)
        except PayloadParseError as e:
            logger.warning("Ignoring corrupt cached %s for %r: %s", what, location, e)
            return None

    def _after_success(self) -> None:
        with self._lock:
            first = not self._had_success
            self._had_success = True
            exclude = self._state.location
        if first and self.config.sync.warm_favorites:
            self.start_cache_warming(exclude=exclude)
