"""Weather dashboard API: FastAPI surface over the shared weather store.

Run with:
    uvicorn weathersync.dashboard:app
"""

import os
from dataclasses import asdict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from weathersync import __version__
from weathersync.app import WeatherApp
from weathersync.config.loader import load_config
from weathersync.models.common import TemperatureUnit

CONFIG_PATH = os.environ.get("WEATHERSYNC_CONFIG", "weathersync.yaml")


def create_app(weather: WeatherApp) -> FastAPI:
    api = FastAPI(title="Weather Dashboard", version=__version__)
    api.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Data endpoints ──────────────────────────────────────────────

    @api.get("/api/current")
    def get_current():
        """Latest current weather, as parsed by the view."""
        snapshot = weather.view.current
        if snapshot is None:
            raise HTTPException(status_code=404, detail="No current weather loaded")
        return {**asdict(snapshot), "unit": weather.view.current_unit}

    @api.get("/api/forecast")
    def get_forecast():
        """Daily summaries aggregated from the latest forecast payload."""
        result = weather.view.forecast
        if result is None:
            raise HTTPException(status_code=404, detail="No forecast loaded")
        return {
            "error": result.error,
            "days": [asdict(d) for d in result.summaries],
        }

    @api.get("/api/state")
    def get_state():
        """Fetch cycle state: phase, errors, offline/stale flags."""
        return {**weather.coordinator.state.as_dict(), "unit": weather.unit}

    @api.get("/api/favorites")
    def get_favorites():
        return {"favorites": weather.favorites.locations()}

    # ── Controls ────────────────────────────────────────────────────

    @api.post("/api/favorites/{location}")
    def add_favorite(location: str):
        changed = weather.favorites.add(location)
        return {"changed": changed, "favorites": weather.favorites.locations()}

    @api.delete("/api/favorites/{location}")
    def delete_favorite(location: str):
        if not weather.favorites.remove(location):
            raise HTTPException(status_code=404, detail=f"{location} is not a favorite")
        return {"favorites": weather.favorites.locations()}

    @api.post("/api/refresh")
    def refresh(location: str | None = None, unit: str | None = None):
        """Manual refresh of the given (or current) location."""
        if location is not None:
            weather.location = location.strip()
        if unit is not None and TemperatureUnit.parse(unit) != weather.unit:
            generation = weather.coordinator.state.generation
            weather.settings.save_unit(unit)
            # The unit observer refreshes unless a fetch was already in flight
            if weather.coordinator.state.generation != generation:
                return weather.coordinator.state.as_dict()
        return weather.refresh(user_initiated=True).as_dict()

    return api


app = create_app(WeatherApp.from_config(load_config(CONFIG_PATH)))
