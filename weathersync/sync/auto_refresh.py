"""Periodic background refresh, active only while its owner says so."""

import logging
import threading
from collections.abc import Callable

from weathersync.models.common import TemperatureUnit
from weathersync.models.sync import FetchPhase
from weathersync.sync.coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


class AutoRefreshLoop:
    """Sleeps for the interval, then runs a background refresh, until stopped.

    The coordinator re-checks connectivity before every fetch, so a cycle
    that finds the network down serves cached data and marks the state stale.
    """

    def __init__(
        self,
        coordinator: SyncCoordinator,
        interval_minutes: int,
        location_provider: Callable[[], str],
        unit_provider: Callable[[], TemperatureUnit],
        is_active: Callable[[], bool] | None = None,
    ):
        self.coordinator = coordinator
        self.interval_minutes = interval_minutes
        self.location_provider = location_provider
        self.unit_provider = unit_provider
        self.is_active = is_active
        self._stop_event = threading.Event()
        self._total_cycles = 0
        self._total_successes = 0
        self._total_failures = 0

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60

    def run(self) -> None:
        """Block until stopped or the liveness condition turns false."""
        if self.interval_minutes <= 0:
            logger.info("Auto-refresh disabled")
            return

        logger.info("Auto-refresh started, every %d minutes", self.interval_minutes)
        while self._should_continue():
            logger.debug("Delaying for %d minutes", self.interval_minutes)
            if self._stop_event.wait(self.interval_seconds):
                break
            if not self._should_continue():
                break
            self._refresh_once()

        logger.info(
            "Auto-refresh stopped: %d cycles (%d ok, %d failed)",
            self._total_cycles, self._total_successes, self._total_failures,
        )

    def start_in_background(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name="auto-refresh", daemon=True)
        thread.start()
        return thread

    def stop(self) -> None:
        self._stop_event.set()

    def _should_continue(self) -> bool:
        if self._stop_event.is_set():
            return False
        return self.is_active is None or self.is_active()

    def _refresh_once(self) -> bool:
        """Run one background refresh. Returns True when live data arrived."""
        self._total_cycles += 1
        location = self.location_provider()
        logger.info("Interval elapsed, fetching weather data for %r", location)
        try:
            state = self.coordinator.refresh(
                location, self.unit_provider(), user_initiated=False
            )
        except Exception:
            self._total_failures += 1
            logger.exception("Auto-refresh cycle %d crashed", self._total_cycles)
            return False

        if state.phase == FetchPhase.READY and not state.offline:
            self._total_successes += 1
            return True
        self._total_failures += 1
        logger.warning(
            "Auto-refresh cycle %d did not complete: phase=%s offline=%s",
            self._total_cycles, state.phase.value, state.offline,
        )
        return False
