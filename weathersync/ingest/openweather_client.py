"""OpenWeatherMap client for current weather and 5-day/3-hour forecasts."""

import logging
import re
import time

import httpx

from weathersync.errors import FetchError, InvalidLocationQuery
from weathersync.models.common import TemperatureUnit

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org"
DEFAULT_USER_AGENT = "weathersync/0.1.0"

_CITY_NAME = re.compile(r"^[a-zA-Z\s,-]+$")
_CITY_PART = re.compile(r"^[a-zA-Z\s]+$")
_COUNTRY_CODE = re.compile(r"^[a-zA-Z]{2}$")
_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")


def build_query_params(query: str) -> dict[str, str]:
    """Map a free-form location query to OpenWeather lookup parameters.

    "London" / "New York" -> q; "94040,us" -> zip; "London,uk" -> q;
    "35.68,139.69" -> lat/lon. Anything else raises InvalidLocationQuery.
    """
    text = query.strip()
    if text and _CITY_NAME.match(text):
        return {"q": text}

    parts = [p.strip() for p in text.split(",")]
    if len(parts) == 2:
        first, second = parts
        if first.isdigit() and _COUNTRY_CODE.match(second):
            return {"zip": f"{first},{second}"}
        if _CITY_PART.match(first) and _COUNTRY_CODE.match(second):
            return {"q": f"{first},{second}"}
        if _NUMBER.match(first) and _NUMBER.match(second):
            return {"lat": first, "lon": second}

    raise InvalidLocationQuery(f"Invalid location query: {query!r}")


class OpenWeatherClient:
    def __init__(
        self,
        api_key: str = "",
        base_url: str = OPENWEATHER_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        max_retries: int = 2,
        retry_base_delay: float = 2.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    def fetch_current(self, query: str, unit: TemperatureUnit | str) -> str:
        """Fetch current conditions for a location query. Returns the raw body."""
        params = build_query_params(query)
        params["units"] = TemperatureUnit.parse(unit).units_param
        return self._get("/data/2.5/weather", params)

    def fetch_forecast(self, lat: float, lon: float, unit: TemperatureUnit | str) -> str:
        """Fetch the 3-hour-interval forecast for coordinates. Returns the raw body."""
        params = {
            "lat": str(lat),
            "lon": str(lon),
            "units": TemperatureUnit.parse(unit).units_param,
        }
        return self._get("/data/2.5/forecast", params)

    def _get(self, path: str, params: dict[str, str]) -> str:
        """GET with retries on 503/429 and transport errors, exponential backoff."""
        url = f"{self.base_url}{path}"
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        params = {**params, "appid": self.api_key}

        for attempt in range(self.max_retries + 1):
            try:
                resp = httpx.get(url, params=params, headers=headers, timeout=self.timeout)
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "OpenWeather request error, retrying in %.1fs: %s", delay, e
                    )
                    time.sleep(delay)
                    continue
                logger.error("OpenWeather request failed for %s: %s", path, e)
                raise FetchError(f"Request failed: {e}") from e

            if resp.status_code in (503, 429) and attempt < self.max_retries:
                delay = self.retry_base_delay * (2**attempt)
                logger.warning(
                    "OpenWeather %s returned %d, retrying in %.1fs (attempt %d/%d)",
                    path, resp.status_code, delay, attempt + 1, self.max_retries,
                )
                time.sleep(delay)
                continue

            if resp.status_code >= 400:
                logger.error(
                    "Unsuccessful response for %s: %d %s",
                    path, resp.status_code, resp.text,
                )
                raise FetchError(
                    f"Unsuccessful response: {resp.status_code}. Body: {resp.text}",
                    resp.status_code,
                )

            body = resp.text
            if not body.strip():
                raise FetchError("Response body is empty.", resp.status_code)
            return body

        raise FetchError(f"Retries exhausted for {path}")
