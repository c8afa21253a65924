"""Store subscriber that keeps display-ready current weather and daily forecasts.

Listeners added with add_listener run after the view has recomputed, on the
view's delivery thread.
"""

import logging
import threading
from collections.abc import Callable

from weathersync.errors import PayloadParseError
from weathersync.forecast.aggregator import aggregate
from weathersync.ingest.parsing import parse_current
from weathersync.models.common import DataKind, TemperatureUnit
from weathersync.models.weather import CurrentWeatherSnapshot, ForecastResult
from weathersync.store.weather_state import Subscriber, WeatherStateStore

logger = logging.getLogger(__name__)


class WeatherView:
    def __init__(
        self,
        store: WeatherStateStore,
        unit_provider: Callable[[], TemperatureUnit],
    ):
        self.store = store
        self.unit_provider = unit_provider
        self._lock = threading.Lock()
        self.current: CurrentWeatherSnapshot | None = None
        self.current_error: str | None = None
        self.forecast: ForecastResult | None = None
        self.current_unit: TemperatureUnit | None = None
        self._listeners: list[Subscriber] = []

    def attach(self) -> None:
        self.store.subscribe(DataKind.CURRENT, self.on_update)
        self.store.subscribe(DataKind.FORECAST, self.on_update)

    def detach(self) -> None:
        self.store.unsubscribe(DataKind.CURRENT, self.on_update)
        self.store.unsubscribe(DataKind.FORECAST, self.on_update)

    def add_listener(self, listener: Subscriber) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Subscriber) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def on_update(self, kind: DataKind) -> None:
        """Notifications carry no payload, so re-read the store."""
        if kind == DataKind.CURRENT:
            self._refresh_current()
        else:
            self._refresh_forecast()
        for listener in list(self._listeners):
            try:
                listener(kind)
            except Exception:
                logger.exception("View listener %r failed on %s update", listener, kind.value)

    def _refresh_current(self) -> None:
        payload = self.store.get_current()
        if payload is None:
            return
        unit = self.unit_provider()
        try:
            snapshot = parse_current(payload)
        except PayloadParseError as e:
            logger.error("Error parsing current weather: %s", e)
            with self._lock:
                self.current_error = f"Error parsing current weather: {e}"
            return
        with self._lock:
            self.current = snapshot
            self.current_unit = unit
            self.current_error = None

    def _refresh_forecast(self) -> None:
        payload = self.store.get_forecast()
        if payload is None:
            return
        result = aggregate(payload, self.unit_provider())
        if not result.ok:
            logger.warning("Forecast unavailable: %s", result.error)
        with self._lock:
            self.forecast = result
