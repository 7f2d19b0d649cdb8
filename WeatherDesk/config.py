"""Application configuration from a .env file and the process environment."""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import dotenv_values

from weather_client import SUPPORTED_UNITS

DEFAULT_ENV_FILE = ".env"
DEFAULT_HISTORY_FILE = "history.json"


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


@dataclass
class AppConfig:
    api_key: str
    units: str = "metric"
    history_file: str = DEFAULT_HISTORY_FILE


def load_config(env_file: str = DEFAULT_ENV_FILE, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Load configuration. Process environment values override the .env file.

    Keys:
        API_KEY: OpenWeather API key (required)
        WEATHER_UNITS: "metric" (default) or "imperial"
        WEATHER_HISTORY_FILE: where recent searches are stored

    Raises:
        ConfigError: If the API key is missing or the units are unsupported
    """
    environ = os.environ if environ is None else environ
    values = {key: value for key, value in dotenv_values(env_file).items() if value is not None}
    values.update(environ)

    api_key = (values.get("API_KEY") or "").strip()
    if not api_key:
        raise ConfigError(f"Missing API_KEY; add API_KEY=<your key> to {env_file} or the environment")

    units = (values.get("WEATHER_UNITS") or "metric").strip().lower()
    if units not in SUPPORTED_UNITS:
        raise ConfigError(f"Invalid WEATHER_UNITS {units!r}; expected one of {SUPPORTED_UNITS}")

    history_file = values.get("WEATHER_HISTORY_FILE") or DEFAULT_HISTORY_FILE

    logging.info(f"Configuration loaded: units={units} history={history_file}")
    return AppConfig(api_key=api_key, units=units, history_file=history_file)
