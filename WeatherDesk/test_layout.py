"""Tests for display text and theming."""
import time

import pytest
from history_manager import HistoryItem
from layout import (
    choose_theme,
    city_from_history_line,
    fahrenheit_to_celsius,
    format_current_lines,
    format_forecast_card,
    format_history_line,
    format_time,
    get_condition_text,
    get_temperature_color,
    icon_url,
    unit_labels,
)
from weather_data import ForecastPoint, WeatherSnapshot


@pytest.fixture
def sample_weather():
    """Sample weather data."""
    return WeatherSnapshot(
        location_name="London",
        temp=15.24,
        feels_like=14.0,
        humidity=70,
        wind_speed=4.13,
        condition="Clouds",
        condition_description="overcast clouds",
        icon="04d",
        timestamp=1700000000,
    )


def local_epoch(hour):
    """Epoch seconds for today at ``hour`` local time."""
    now = time.localtime()
    return time.mktime((now.tm_year, now.tm_mon, now.tm_mday, hour, 0, 0, 0, 0, -1))


def test_fahrenheit_to_celsius():
    assert fahrenheit_to_celsius(32) == 0
    assert fahrenheit_to_celsius(212) == 100
    assert fahrenheit_to_celsius(70.7) == pytest.approx(21.5)


def test_unit_labels():
    assert unit_labels("metric") == ("°C", "m/s")
    assert unit_labels("imperial") == ("°F", "mph")


def test_temperature_color_cold():
    """Test color for cold temperatures."""
    assert get_temperature_color(-10.0) == "#0000ff"


def test_temperature_color_hot():
    assert get_temperature_color(50.0) == "#ff0000"


def test_temperature_color_imperial_matches_metric():
    assert get_temperature_color(86.0, "imperial") == get_temperature_color(30.0, "metric")


def test_condition_text():
    assert get_condition_text("Clouds") == "Cloudy"
    assert get_condition_text("thunderstorm") == "Storm"
    assert get_condition_text("SQUALL") == "Squall"


def test_format_current_lines_metric(sample_weather):
    lines = format_current_lines(sample_weather, "metric")
    assert lines == [
        "London: Cloudy (overcast clouds)",
        "Temperature: 15.2 °C (Feels like 14.0 °C)",
        "Humidity: 70%",
        "Wind: 4.1 m/s",
    ]


def test_format_current_lines_without_condition(sample_weather):
    sample_weather.condition = ""
    lines = format_current_lines(sample_weather, "imperial")
    assert lines[0] == "London"
    assert lines[3] == "Wind: 4.1 mph"


def test_format_forecast_card():
    point = ForecastPoint(timestamp=1700000000, temp=9.96, condition="Rain", icon="10n")
    when, temp, condition = format_forecast_card(point, "metric")
    assert when == format_time(1700000000)
    assert temp == "10.0 °C"
    assert condition == "Rain"


def test_format_time_bad_input():
    assert format_time(10 ** 20) == ""


def test_history_line_round_trip():
    line = format_history_line(HistoryItem("Stratford-upon-Avon - UK", 1700000000))
    assert city_from_history_line(line) == "Stratford-upon-Avon - UK"
    assert city_from_history_line("no separator") is None


def test_choose_theme_uses_sun_times(sample_weather):
    sample_weather.sunrise = 1700000000
    sample_weather.sunset = 1700030000
    assert choose_theme(sample_weather, now=1700010000) == "day"
    assert choose_theme(sample_weather, now=1700040000) == "night"


def test_choose_theme_falls_back_to_clock(sample_weather):
    assert choose_theme(sample_weather, now=local_epoch(12)) == "day"
    assert choose_theme(None, now=local_epoch(23)) == "night"
    assert choose_theme(now=local_epoch(6)) == "day"
    assert choose_theme(now=local_epoch(18)) == "night"


def test_icon_url():
    assert icon_url("04d") == "https://openweathermap.org/img/wn/04d@2x.png"
    assert icon_url("") is None
    assert icon_url("  ") is None
