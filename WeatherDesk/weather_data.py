"""Weather domain model - pure data structures independent of any API."""
import time
from dataclasses import dataclass, field
from typing import List, Optional

# Six 3-hour samples, roughly the next 18 hours.
MAX_FORECAST_POINTS = 6


@dataclass
class ForecastPoint:
    """One forecast sample."""
    timestamp: int  # UNIX timestamp (UTC)
    temp: float
    condition: str  # e.g., "Clouds", "Rain", "Clear"
    icon: str  # OpenWeatherMap icon code, e.g. "04d"


@dataclass
class WeatherSnapshot:
    """Current conditions for one location, plus the short-term forecast."""
    location_name: str
    temp: float
    feels_like: float
    humidity: int  # percentage
    wind_speed: float
    condition: str
    condition_description: str  # e.g., "broken clouds", "light rain"
    icon: str
    timestamp: int  # observation time, UNIX timestamp (UTC)
    sunrise: int = 0  # 0 when unknown
    sunset: int = 0
    forecast: List[ForecastPoint] = field(default_factory=list)

    def is_daytime(self, now: Optional[float] = None) -> Optional[bool]:
        """
        Check whether ``now`` falls between sunrise and sunset.

        Returns None when the provider did not report sunrise/sunset.
        """
        if not self.sunrise or not self.sunset:
            return None
        now = time.time() if now is None else now
        return self.sunrise <= now < self.sunset
