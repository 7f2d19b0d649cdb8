"""Single-shot HTTP GET used by the retry coordinator."""
import logging
from typing import NamedTuple

import requests

from weather_errors import TransportError

DEFAULT_TIMEOUT = 10


class HttpResponse(NamedTuple):
    """Raw HTTP result: status code and body text, uninterpreted."""
    status_code: int
    body: str


class HttpFetcher:
    """
    Issues one GET request with a fixed timeout.

    Holds no mutable state, so one instance can be shared by several
    worker threads.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize fetcher.

        Args:
            timeout: Connect/read timeout in seconds
        """
        self.timeout = timeout

    def fetch(self, url: str) -> HttpResponse:
        """
        Perform a GET request against a fully-formed URL.

        Returns:
            HttpResponse: Status code and raw body

        Raises:
            TransportError: If no response was received
        """
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logging.error(f"Request timed out after {self.timeout}s")
            raise TransportError(f"Timed out after {self.timeout}s: {e}") from e
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise TransportError(f"Network error: {e}") from e

        logging.debug(f"HTTP {response.status_code}, {len(response.text)} bytes")
        return HttpResponse(response.status_code, response.text)
