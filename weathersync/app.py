"""Composition root: builds one instance of every service and wires them together."""

import logging
from pathlib import Path

from weathersync.config.schema import AppConfig
from weathersync.ingest.connectivity import ConnectivityChecker
from weathersync.ingest.openweather_client import OpenWeatherClient
from weathersync.models.common import TemperatureUnit
from weathersync.models.sync import SyncState
from weathersync.storage.cache_store import LocalCacheStore
from weathersync.storage.settings_store import SETTINGS_FILENAME, SettingsStore, UserSettings
from weathersync.store.weather_state import WeatherStateStore
from weathersync.sync.auto_refresh import AutoRefreshLoop
from weathersync.sync.coordinator import Notifier, SyncCoordinator
from weathersync.sync.favorites import FavoritesManager
from weathersync.view import WeatherView

logger = logging.getLogger(__name__)

# Upper bound on waiting for subscribers to catch up after a refresh
DRAIN_TIMEOUT = 5.0


class WeatherApp:
    def __init__(
        self,
        config: AppConfig,
        client: OpenWeatherClient,
        connectivity: ConnectivityChecker,
        cache: LocalCacheStore,
        settings: SettingsStore,
        notify: Notifier | None = None,
        refresh_on_unit_change: bool = True,
    ):
        self.config = config
        self.client = client
        self.connectivity = connectivity
        self.cache = cache
        self.settings = settings
        self.store = WeatherStateStore()
        self.coordinator = SyncCoordinator(
            client, cache, self.store, connectivity, config, notify=notify
        )
        self.favorites = FavoritesManager(cache)
        self.view = WeatherView(self.store, lambda: self.coordinator.data_unit)
        self.view.attach()
        self.location = cache.load_last_viewed_location() or config.sync.default_location
        if refresh_on_unit_change:
            self.settings.subscribe_unit(self._on_unit_changed)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        notify: Notifier | None = None,
        refresh_on_unit_change: bool = True,
    ) -> "WeatherApp":
        data_dir = Path(config.cache.data_dir)
        client = OpenWeatherClient(
            api_key=config.api.api_key,
            base_url=config.api.base_url,
            timeout=config.api.timeout,
            max_retries=config.api.max_retries,
            retry_base_delay=config.api.retry_base_delay,
        )
        connectivity = ConnectivityChecker(
            config.sync.connectivity_url or config.api.base_url,
            timeout=config.sync.connectivity_timeout,
        )
        settings = SettingsStore(
            data_dir / SETTINGS_FILENAME,
            defaults=UserSettings(**config.settings.model_dump()),
        )
        return cls(
            config,
            client,
            connectivity,
            LocalCacheStore(data_dir),
            settings,
            notify,
            refresh_on_unit_change,
        )

    @property
    def unit(self) -> TemperatureUnit:
        return self.settings.load_unit()

    def refresh(
        self, location: str | None = None, user_initiated: bool = True
    ) -> SyncState:
        """Refresh and wait for the view to catch up before returning the state."""
        if location is not None:
            self.location = location.strip()
        state = self.coordinator.refresh(self.location, self.unit, user_initiated=user_initiated)
        self._drain()
        return state

    def show_cached(self, location: str | None = None) -> bool:
        if location is not None:
            self.location = location.strip()
        loaded = self.coordinator.load_offline(self.location)
        self._drain()
        return loaded

    def auto_refresh_loop(self, interval_minutes: int | None = None) -> AutoRefreshLoop:
        if interval_minutes is None:
            interval_minutes = self.settings.load_refresh_interval()
        return AutoRefreshLoop(
            self.coordinator,
            interval_minutes,
            location_provider=lambda: self.location,
            unit_provider=lambda: self.unit,
        )

    def close(self) -> None:
        self.view.detach()
        self.settings.unsubscribe_unit(self._on_unit_changed)
        self.store.close()

    def _drain(self) -> None:
        if not self.store.drain(DRAIN_TIMEOUT):
            logger.warning("Store subscribers still busy after %.1fs", DRAIN_TIMEOUT)

    def _on_unit_changed(self, unit: TemperatureUnit) -> None:
        if not self.location or self.coordinator.state.is_loading:
            return
        logger.info("Unit changed to %s, refreshing %r", unit.value, self.location)
        self.refresh(user_initiated=True)
