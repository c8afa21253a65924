"""Network reachability probe used as a pre-flight gate before fetching."""

import logging

import httpx

logger = logging.getLogger(__name__)


class ConnectivityChecker:
    def __init__(self, probe_url: str, timeout: float = 5.0):
        self.probe_url = probe_url
        self.timeout = timeout

    def is_available(self) -> bool:
        """True when the probe URL answers with any HTTP response."""
        try:
            httpx.head(self.probe_url, timeout=self.timeout)
            return True
        except httpx.RequestError as e:
            logger.info("Network unavailable (%s): %s", self.probe_url, e)
            return False
