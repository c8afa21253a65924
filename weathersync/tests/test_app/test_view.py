"""Tests for the store-driven weather view."""

import json

from weathersync.models.common import TemperatureUnit
from weathersync.store.weather_state import WeatherStateStore
from weathersync.tests.conftest import make_current
from weathersync.view import WeatherView


class TestWeatherView:
    def test_updates_on_publish(self, store: WeatherStateStore, forecast_text: str):
        view = WeatherView(store, lambda: TemperatureUnit.FAHRENHEIT)
        view.attach()
        store.publish_current(make_current("Oslo", "NO"))
        store.publish_forecast(json.loads(forecast_text))
        assert store.drain(timeout=5)
        assert view.current.location_name == "Oslo, NO"
        assert view.current_unit == TemperatureUnit.FAHRENHEIT
        assert view.forecast.ok
        assert view.forecast.summaries[0].unit == TemperatureUnit.FAHRENHEIT

    def test_unparseable_current_keeps_previous(self, store: WeatherStateStore):
        view = WeatherView(store, lambda: TemperatureUnit.CELSIUS)
        view.attach()
        store.publish_current(make_current("Oslo"))
        # Notifications carry no payload, so let the view read Oslo before it is replaced
        assert store.drain(timeout=5)
        store.publish_current(make_current("Nowhere", lat=None, lon=None))
        assert store.drain(timeout=5)
        assert view.current.location_name == "Oslo, GB"
        assert view.current_error.startswith("Error parsing current weather")

    def test_forecast_error_surfaced(self, store: WeatherStateStore):
        view = WeatherView(store, lambda: TemperatureUnit.CELSIUS)
        view.attach()
        store.publish_forecast({"cod": "200"})
        assert store.drain(timeout=5)
        assert view.forecast.error == "Forecast list missing"

    def test_detach(self, store: WeatherStateStore):
        view = WeatherView(store, lambda: TemperatureUnit.CELSIUS)
        view.attach()
        view.detach()
        store.publish_current(make_current())
        assert store.drain(timeout=5)
        assert view.current is None

    def test_listener_runs_after_recompute(self, store: WeatherStateStore, forecast_text: str):
        view = WeatherView(store, lambda: TemperatureUnit.CELSIUS)
        view.attach()
        seen: list[int] = []
        view.add_listener(lambda kind: seen.append(len(view.forecast.summaries)))
        store.publish_forecast(json.loads(forecast_text))
        assert store.drain(timeout=5)
        assert seen == [2]

    def test_failing_listener_contained(self, store: WeatherStateStore):
        view = WeatherView(store, lambda: TemperatureUnit.CELSIUS)
        view.attach()

        def broken(kind):
            raise RuntimeError("boom")

        view.add_listener(broken)
        store.publish_current(make_current("Oslo"))
        assert store.drain(timeout=5)
        assert view.current.location_name == "Oslo, GB"
