"""Retry loop around the HTTP fetcher that yields parsed JSON objects."""
import json
import logging
import re
import time
from typing import Any, Callable, Dict

from http_fetcher import HttpFetcher
from weather_errors import ParseError, ProviderError, RequestFailed, WeatherError

MAX_RETRIES = 2
BACKOFF_SECONDS = 0.4

_APPID_RE = re.compile(r"(appid=)[^&]*")


def redact_url(url: str) -> str:
    """Mask the API key so URLs can be logged."""
    return _APPID_RE.sub(r"\1***", url)


class RetryCoordinator:
    """
    Wraps a fetcher with bounded retries and linear backoff.

    Every failure is retried the same way, client errors such as 404
    included.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        max_retries: int = MAX_RETRIES,
        backoff_seconds: float = BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize retry coordinator.

        Args:
            fetcher: Object with a ``fetch(url)`` method returning HttpResponse
            max_retries: Retries after the first attempt
            backoff_seconds: Delay step; attempt N waits N * backoff_seconds
            sleep: Sleep function (injectable for tests)
        """
        self.fetcher = fetcher
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def get_json(self, url: str) -> Dict[str, Any]:
        """
        Fetch a URL and return the decoded JSON object.

        Raises:
            RequestFailed: If every attempt failed
        """
        attempts = self.max_retries + 1
        safe_url = redact_url(url)
        last_error: WeatherError = WeatherError("no attempt made")

        for attempt in range(1, attempts + 1):
            logging.info(f"Making API request ({attempt}/{attempts}): {safe_url}")
            try:
                return self._attempt(url)
            except WeatherError as e:
                last_error = e
                logging.warning(f"Attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    delay = self.backoff_seconds * attempt
                    logging.info(f"Retrying in {delay:.1f}s...")
                    self._sleep(delay)

        logging.error(f"Giving up on {safe_url} after {attempts} attempts: {last_error}")
        raise RequestFailed(attempts, last_error) from last_error

    def _attempt(self, url: str) -> Dict[str, Any]:
        response = self.fetcher.fetch(url)
        data = parse_json_object(response.body)
        if 200 <= response.status_code < 300:
            logging.debug(f"API response keys: {list(data.keys())}")
            return data

        message = data.get("message")
        logging.error(f"OpenWeather API error response: {data}")
        raise ProviderError(response.status_code, str(message) if message else None)


def parse_json_object(body: str) -> Dict[str, Any]:
    """Decode a body that must be a JSON object (not an array or scalar)."""
    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise ParseError(f"Invalid JSON response: {e.__class__.__name__}: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data
