"""Integration tests - can optionally hit real API (disabled by default)."""
import os
import pytest
from weather_client import WeatherClient
from weather_data import MAX_FORECAST_POINTS


@pytest.mark.skipif(
    not os.environ.get("OPENWEATHER_API_KEY"),
    reason="OPENWEATHER_API_KEY not set - skipping integration test"
)
def test_weather_client_integration():
    """
    Integration test that hits the real OpenWeather API.

    Set OPENWEATHER_API_KEY environment variable to run this test.
    """
    client = WeatherClient(os.environ["OPENWEATHER_API_KEY"])

    snapshot = client.get_weather("London,UK", "metric")

    assert snapshot.location_name
    assert snapshot.temp is not None
    assert 0 <= snapshot.humidity <= 100
    assert snapshot.timestamp > 0
    assert len(snapshot.forecast) == MAX_FORECAST_POINTS
    timestamps = [p.timestamp for p in snapshot.forecast]
    assert timestamps == sorted(timestamps)
