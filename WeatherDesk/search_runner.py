"""Runs weather searches on a small worker pool, off the UI thread."""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Optional

from history_manager import HistoryManager
from weather_client import WeatherClient
from weather_data import WeatherSnapshot

DEFAULT_WORKERS = 3

Dispatch = Callable[[Callable[[], None]], None]


def _call_inline(callback: Callable[[], None]) -> None:
    callback()


class SearchRunner:
    """
    Submits ``get_weather`` calls to a bounded thread pool.

    Results are handed back through ``dispatch``, which must schedule the
    callback on the UI's own thread. A newer search for the same slot
    supersedes older ones still in flight: their results are dropped.
    """

    def __init__(
        self,
        client: WeatherClient,
        history: Optional[HistoryManager] = None,
        max_workers: int = DEFAULT_WORKERS,
        dispatch: Optional[Dispatch] = None,
    ):
        self.client = client
        self.history = history
        self._dispatch = dispatch or _call_inline
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="weather-search")
        self._lock = threading.Lock()
        self._latest: Dict[str, int] = {}

    def submit(
        self,
        city: str,
        units: str,
        on_success: Callable[[WeatherSnapshot], None],
        on_error: Callable[[Exception], None],
        slot: str = "main",
    ) -> Future:
        """
        Queue a search and return its future.

        The future resolves to the snapshot or raises the search error. It
        can be cancelled while still queued.
        """
        with self._lock:
            ticket = self._latest.get(slot, 0) + 1
            self._latest[slot] = ticket
        logging.debug(f"Queueing search #{ticket} for {city!r} in slot {slot!r}")
        return self._executor.submit(self._run, city, units, on_success, on_error, slot, ticket)

    def is_current(self, slot: str, ticket: int) -> bool:
        with self._lock:
            return self._latest.get(slot) == ticket

    def _run(self, city, units, on_success, on_error, slot, ticket) -> WeatherSnapshot:
        try:
            snapshot = self.client.get_weather(city, units)
        except Exception as e:
            logging.error(f"Search for {city!r} failed: {e}")
            if self.is_current(slot, ticket):
                self._dispatch(lambda exc=e: on_error(exc))
            else:
                logging.info(f"Dropping error from superseded search #{ticket} for {city!r}")
            raise

        if self.history is not None:
            self.history.add(snapshot.location_name)

        if self.is_current(slot, ticket):
            self._dispatch(lambda: on_success(snapshot))
        else:
            logging.info(f"Dropping result of superseded search #{ticket} for {city!r}")
        return snapshot

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting searches and cancel queued ones."""
        self._executor.shutdown(wait=wait, cancel_futures=True)
