"""JSON-backed list of recent searches."""
import json
import logging
import os
import tempfile
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, List, Optional

MAX_ITEMS = 25


@dataclass
class HistoryItem:
    city: str
    when: int  # UNIX timestamp of the search


class HistoryManager:
    """
    Recent-search history stored as a JSON array at ``path``.

    Failures are logged and swallowed so they never break a weather search.
    """

    def __init__(self, path: str, max_items: int = MAX_ITEMS, clock: Callable[[], float] = time.time):
        self.path = path
        self.max_items = max_items
        self._clock = clock
        self._lock = threading.Lock()

    def load(self) -> List[HistoryItem]:
        """Return saved searches, most recent first."""
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            logging.error(f"Could not read history file {self.path}: {e}")
            return []

        if not isinstance(raw, list):
            logging.error(f"History file {self.path} does not hold a list, ignoring it")
            return []

        items = []
        for entry in raw:
            item = _parse_entry(entry)
            if item is None:
                logging.warning(f"Skipping malformed history entry: {entry!r}")
            else:
                items.append(item)
        return items

    def add(self, city: str) -> None:
        """Record a search, replacing any earlier entry for the same city."""
        city = (city or "").strip()
        if not city:
            return
        key = city.casefold()
        try:
            with self._lock:
                items = [item for item in self.load() if item.city.casefold() != key]
                items.insert(0, HistoryItem(city=city, when=int(self._clock())))
                self._save(items[:self.max_items])
        except Exception as e:
            logging.error(f"Could not update history file {self.path}: {e}", exc_info=True)

    def _save(self, items: List[HistoryItem]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".history-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([asdict(item) for item in items], f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logging.debug(f"Saved {len(items)} history entries to {self.path}")


def _parse_entry(entry: Any) -> Optional[HistoryItem]:
    """Build an item from one stored entry, or None if it is unusable."""
    if not isinstance(entry, dict):
        return None
    city = entry.get("city")
    when = entry.get("when")
    if not isinstance(city, str) or not city.strip():
        return None
    if isinstance(when, bool) or not isinstance(when, (int, float)):
        return None
    try:
        return HistoryItem(city=city.strip(), when=int(when))
    except (OverflowError, ValueError):
        return None
