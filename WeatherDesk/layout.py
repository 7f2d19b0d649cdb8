"""Display text and theming for the weather window - pure functions for testability."""
import time
from typing import Dict, List, Optional, Tuple

from history_manager import HistoryItem
from weather_data import ForecastPoint, WeatherSnapshot

ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"
HISTORY_SEPARATOR = " - "

THEMES: Dict[str, Dict[str, str]] = {
    "day": {"bg": "#dff1ff", "card": "#ffffff", "fg": "#1f2937", "accent": "#3a83f1"},
    "night": {"bg": "#071428", "card": "#12263a", "fg": "#e6eef8", "accent": "#2563eb"},
}


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    return (fahrenheit - 32) * 5 / 9


def unit_labels(units: str) -> Tuple[str, str]:
    """Return (temperature unit, wind speed unit) for a unit system."""
    if units == "imperial":
        return "°F", "mph"
    return "°C", "m/s"


def format_time(epoch_seconds: int, fmt: str = "%a %H:%M") -> str:
    """Format a UNIX timestamp in local time, e.g. "Mon 07:15"."""
    try:
        return time.strftime(fmt, time.localtime(epoch_seconds))
    except (OverflowError, OSError, ValueError, TypeError):
        return ""


def get_condition_text(condition: str) -> str:
    """
    Get short text representation of weather condition.

    Args:
        condition: Provider condition group, e.g. "Clouds"

    Returns:
        Short condition string (e.g., "Cloudy", "Rain", "Clear")
    """
    condition_map = {
        "clear": "Clear",
        "clouds": "Cloudy",
        "rain": "Rain",
        "drizzle": "Drizzle",
        "thunderstorm": "Storm",
        "snow": "Snow",
        "mist": "Mist",
        "fog": "Fog",
        "haze": "Haze",
    }
    return condition_map.get(condition.lower(), condition.capitalize())


def get_temperature_color(temp: float, units: str = "metric") -> str:
    """
    Get a hex color for a temperature using a simple gradient.

    Cold (< 0°C) = blue
    Cool (0-15°C) = cyan
    Mild (15-25°C) = green/yellow
    Warm (25-35°C) = yellow/orange
    Hot (> 35°C) = red
    """
    temp_c = fahrenheit_to_celsius(temp) if units == "imperial" else temp
    if temp_c < 0:
        rgb = (0, 0, 255)
    elif temp_c < 15:
        ratio = temp_c / 15.0
        rgb = (0, int(255 * ratio), 255)
    elif temp_c < 25:
        ratio = (temp_c - 15) / 10.0
        rgb = (int(255 * ratio), 255, int(255 * (1 - ratio)))
    elif temp_c < 35:
        ratio = (temp_c - 25) / 10.0
        rgb = (255, int(255 * (1 - ratio * 0.5)), 0)
    else:
        ratio = min((temp_c - 35) / 10.0, 1.0)
        rgb = (255, int(255 * (1 - ratio)), 0)
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def format_current_lines(snapshot: WeatherSnapshot, units: str) -> List[str]:
    """Title, temperature, humidity and wind lines for the current panel."""
    temp_unit, wind_unit = unit_labels(units)
    title = snapshot.location_name
    if snapshot.condition:
        title += f": {get_condition_text(snapshot.condition)}"
        if snapshot.condition_description:
            title += f" ({snapshot.condition_description})"
    return [
        title,
        f"Temperature: {snapshot.temp:.1f} {temp_unit} (Feels like {snapshot.feels_like:.1f} {temp_unit})",
        f"Humidity: {snapshot.humidity}%",
        f"Wind: {snapshot.wind_speed:.1f} {wind_unit}",
    ]


def format_forecast_card(point: ForecastPoint, units: str) -> Tuple[str, str, str]:
    """Time, temperature and condition text for one forecast card."""
    temp_unit, _ = unit_labels(units)
    return (
        format_time(point.timestamp),
        f"{point.temp:.1f} {temp_unit}",
        get_condition_text(point.condition) if point.condition else "",
    )


def format_history_line(item: HistoryItem) -> str:
    return f"{item.city}{HISTORY_SEPARATOR}{format_time(item.when, '%Y-%m-%d %H:%M')}"


def city_from_history_line(line: str) -> Optional[str]:
    """Recover the city from a line built by format_history_line."""
    if HISTORY_SEPARATOR not in line:
        return None
    city = line.rsplit(HISTORY_SEPARATOR, 1)[0].strip()
    return city or None


def choose_theme(snapshot: Optional[WeatherSnapshot] = None, now: Optional[float] = None) -> str:
    """
    Pick "day" or "night".

    Uses the location's sunrise/sunset when known, otherwise the local
    clock (day between 06:00 and 18:00).
    """
    now = time.time() if now is None else now
    if snapshot is not None:
        daytime = snapshot.is_daytime(now)
        if daytime is not None:
            return "day" if daytime else "night"
    hour = time.localtime(now).tm_hour
    return "day" if 6 <= hour < 18 else "night"


def icon_url(icon: str) -> Optional[str]:
    if not icon or not icon.strip():
        return None
    return ICON_URL.format(icon=icon.strip())
