"""Tests for running searches on the worker pool."""
import threading

import pytest
from unittest.mock import Mock
from history_manager import HistoryManager
from search_runner import SearchRunner
from weather_data import WeatherSnapshot
from weather_errors import ProviderError, RequestFailed


def make_snapshot(name="London"):
    return WeatherSnapshot(name, 15.2, 15.2, 70, 0.0, "Clouds", "overcast", "04d", 1700000000)


class QueueDispatch:
    """Collects callbacks the way a UI event queue would."""

    def __init__(self):
        self.pending = []
        self.threads = []

    def __call__(self, callback):
        self.threads.append(threading.current_thread().name)
        self.pending.append(callback)

    def run_all(self):
        while self.pending:
            self.pending.pop(0)()


@pytest.fixture
def runner_factory():
    runners = []

    def build(client, **kwargs):
        runner = SearchRunner(client, **kwargs)
        runners.append(runner)
        return runner

    yield build
    for runner in runners:
        runner.shutdown(wait=True)


def test_success_dispatches_result_and_records_history(runner_factory, tmp_path):
    client = Mock()
    client.get_weather.return_value = make_snapshot("London")
    history = HistoryManager(str(tmp_path / "history.json"))
    dispatch = QueueDispatch()
    on_success, on_error = Mock(), Mock()

    runner = runner_factory(client, history=history, dispatch=dispatch)
    future = runner.submit("london", "metric", on_success, on_error)

    assert future.result(timeout=5).location_name == "London"
    client.get_weather.assert_called_once_with("london", "metric")
    assert [i.city for i in history.load()] == ["London"]

    on_success.assert_not_called()
    dispatch.run_all()
    on_success.assert_called_once_with(client.get_weather.return_value)
    on_error.assert_not_called()
    assert dispatch.threads[0].startswith("weather-search")


def test_error_dispatches_error(runner_factory):
    error = RequestFailed(3, ProviderError(404, "city not found"))
    client = Mock()
    client.get_weather.side_effect = error
    dispatch = QueueDispatch()
    on_success, on_error = Mock(), Mock()

    runner = runner_factory(client, dispatch=dispatch)
    future = runner.submit("Atlantis", "metric", on_success, on_error)

    with pytest.raises(RequestFailed):
        future.result(timeout=5)
    dispatch.run_all()
    on_error.assert_called_once_with(error)
    on_success.assert_not_called()


def test_failed_search_not_added_to_history(runner_factory, tmp_path):
    client = Mock()
    client.get_weather.side_effect = RequestFailed(3, ProviderError(500))
    history = HistoryManager(str(tmp_path / "history.json"))

    runner = runner_factory(client, history=history)
    future = runner.submit("London", "metric", Mock(), Mock())

    with pytest.raises(RequestFailed):
        future.result(timeout=5)
    assert history.load() == []


def test_newer_search_supersedes_older(runner_factory):
    release_first = threading.Event()
    first_started = threading.Event()

    def get_weather(city, units):
        if city == "Slow":
            first_started.set()
            release_first.wait(timeout=5)
        return make_snapshot(city)

    client = Mock()
    client.get_weather.side_effect = get_weather
    received = []

    runner = runner_factory(client)
    slow = runner.submit("Slow", "metric", received.append, Mock())
    assert first_started.wait(timeout=5)
    fast = runner.submit("Fast", "metric", received.append, Mock())
    fast.result(timeout=5)
    release_first.set()
    slow.result(timeout=5)

    assert [s.location_name for s in received] == ["Fast"]


def test_slots_are_independent(runner_factory):
    client = Mock()
    client.get_weather.side_effect = lambda city, units: make_snapshot(city)
    received = []

    runner = runner_factory(client)
    a = runner.submit("A", "metric", received.append, Mock(), slot="left")
    b = runner.submit("B", "metric", received.append, Mock(), slot="right")
    a.result(timeout=5)
    b.result(timeout=5)

    assert sorted(s.location_name for s in received) == ["A", "B"]


def test_concurrent_searches_use_separate_workers(runner_factory):
    barrier = threading.Barrier(3, timeout=5)

    def get_weather(city, units):
        barrier.wait()
        return make_snapshot(city)

    client = Mock()
    client.get_weather.side_effect = get_weather

    runner = runner_factory(client, max_workers=3)
    futures = [runner.submit(c, "metric", Mock(), Mock(), slot=c) for c in ("A", "B", "C")]

    assert [f.result(timeout=5).location_name for f in futures] == ["A", "B", "C"]


def test_corrupt_history_does_not_fail_search(runner_factory, tmp_path):
    path = tmp_path / "history.json"
    path.write_text('[{"city": "Oslo", "when": 1e400}]', encoding="utf-8")
    client = Mock()
    client.get_weather.return_value = make_snapshot("London")
    on_success, on_error = Mock(), Mock()

    runner = runner_factory(client, history=HistoryManager(str(path)))
    future = runner.submit("London", "metric", on_success, on_error)

    assert future.result(timeout=5).location_name == "London"
    on_success.assert_called_once()
    on_error.assert_not_called()
