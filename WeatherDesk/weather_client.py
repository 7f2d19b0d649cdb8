"""OpenWeather client that combines current conditions and forecast."""
import logging
from typing import Optional

import requests

from http_fetcher import HttpFetcher
from response_mapper import map_current, map_forecast_list
from retry_coordinator import RetryCoordinator
from weather_data import WeatherSnapshot

SUPPORTED_UNITS = ("metric", "imperial")


class WeatherClient:
    """
    Public entry point of the retrieval layer.

    Uses the free Current Weather and 5 day / 3 hour Forecast APIs:
    https://openweathermap.org/current and https://openweathermap.org/forecast5
    """

    BASE_URL = "https://api.openweathermap.org/data/2.5"

    def __init__(
        self,
        api_key: str,
        fetcher: Optional[HttpFetcher] = None,
        coordinator: Optional[RetryCoordinator] = None,
        base_url: str = BASE_URL,
    ):
        """
        Initialize weather client.

        Args:
            api_key: OpenWeather API key (must be non-empty)
            fetcher: HTTP fetcher; a default HttpFetcher is created when omitted
            coordinator: Retry coordinator; wraps ``fetcher`` when omitted
            base_url: API root, without trailing slash
        """
        if not api_key or not api_key.strip():
            raise ValueError("An OpenWeather API key is required")
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.coordinator = coordinator or RetryCoordinator(fetcher or HttpFetcher())

    def build_url(self, endpoint: str, city: str, units: str) -> str:
        """Build a fully-encoded request URL for ``endpoint``."""
        params = {"q": city, "appid": self.api_key, "units": units}
        request = requests.Request("GET", f"{self.base_url}/{endpoint}", params=params)
        return request.prepare().url

    def get_weather(self, city: str, units: str = "metric") -> WeatherSnapshot:
        """
        Fetch current weather and the short-term forecast for a city.

        The current-weather call runs first; if it fails the forecast is not
        requested. A forecast failure fails the whole call as well.

        Args:
            city: City query, e.g. "London" or "London,UK"
            units: "metric" or "imperial"

        Raises:
            ValueError: If the city is blank or the units are unsupported
            RequestFailed: If a request exhausted its retries
            MalformedResponse: If a response lacked required fields
        """
        if units not in SUPPORTED_UNITS:
            raise ValueError(f"Unsupported units {units!r}; expected one of {SUPPORTED_UNITS}")
        city = (city or "").strip()
        if not city:
            raise ValueError("City name must not be empty")

        logging.info(f"Fetching weather for {city!r} ({units})")
        current_json = self.coordinator.get_json(self.build_url("weather", city, units))
        snapshot = map_current(current_json, city)

        forecast_json = self.coordinator.get_json(self.build_url("forecast", city, units))
        snapshot.forecast = map_forecast_list(forecast_json)

        logging.info(
            f"Weather ready for {snapshot.location_name}: {snapshot.temp}, "
            f"{len(snapshot.forecast)} forecast points"
        )
        return snapshot
