"""
Map OpenWeather JSON payloads onto the weather domain model.

Each endpoint is described by a schema of fields. A field names its path
through the payload, whether it is required, and the default used when an
optional field is absent or unusable. Required fields that cannot be read
raise MalformedResponse.
"""
import logging
import math
import time
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

from weather_data import MAX_FORECAST_POINTS, ForecastPoint, WeatherSnapshot
from weather_errors import MalformedResponse

PathStep = Union[str, int]

_MISSING = object()


class Field(NamedTuple):
    path: Sequence[PathStep]
    convert: Callable[[Any], Any]
    required: bool = False
    default: Any = None


def _to_int(value: Any) -> int:
    # bool is an int subclass; a flag is never a valid reading
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    return int(_to_float(value))


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number


def _to_str(value: Any) -> str:
    if isinstance(value, (dict, list)):
        raise TypeError("expected a string")
    return str(value)


CURRENT_FIELDS: Dict[str, Field] = {
    "location_name": Field(("name",), _to_str),
    "temp": Field(("main", "temp"), _to_float, required=True),
    "feels_like": Field(("main", "feels_like"), _to_float),
    "humidity": Field(("main", "humidity"), _to_int, required=True),
    "wind_speed": Field(("wind", "speed"), _to_float, default=0.0),
    "condition": Field(("weather", 0, "main"), _to_str, default=""),
    "condition_description": Field(("weather", 0, "description"), _to_str, default=""),
    "icon": Field(("weather", 0, "icon"), _to_str, default=""),
    "timestamp": Field(("dt",), _to_int),
    "sunrise": Field(("sys", "sunrise"), _to_int, default=0),
    "sunset": Field(("sys", "sunset"), _to_int, default=0),
}

FORECAST_FIELDS: Dict[str, Field] = {
    "timestamp": Field(("dt",), _to_int, required=True),
    "temp": Field(("main", "temp"), _to_float, required=True),
    "condition": Field(("weather", 0, "main"), _to_str, default=""),
    "icon": Field(("weather", 0, "icon"), _to_str, default=""),
}


def _lookup(payload: Any, path: Sequence[PathStep]) -> Any:
    node = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return _MISSING
            node = node[step]
        else:
            if not isinstance(node, Mapping) or step not in node or node[step] is None:
                return _MISSING
            node = node[step]
    return node


def _dotted(path: Sequence[PathStep], prefix: str = "") -> str:
    parts = [f"[{step}]" if isinstance(step, int) else f".{step}" for step in path]
    return (prefix + "".join(parts)).lstrip(".")


def apply_schema(
    payload: Any,
    schema: Mapping[str, Field],
    defaults: Optional[Mapping[str, Any]] = None,
    where: str = "",
) -> Dict[str, Any]:
    """
    Read every field in ``schema`` from ``payload``.

    ``defaults`` overrides a field's static default (for defaults that depend
    on other values, such as feels_like falling back to temp).
    """
    defaults = defaults or {}
    values: Dict[str, Any] = {}
    for name, rule in schema.items():
        raw = _lookup(payload, rule.path)
        if raw is not _MISSING:
            try:
                values[name] = rule.convert(raw)
                continue
            except (TypeError, ValueError, OverflowError) as e:
                if rule.required:
                    raise MalformedResponse(_dotted(rule.path, where), f"unusable: {e}") from e
                logging.debug(f"Ignoring unusable optional field {_dotted(rule.path, where)}: {raw!r}")
        elif rule.required:
            raise MalformedResponse(_dotted(rule.path, where))
        values[name] = defaults.get(name, rule.default)
    return values


def map_current(payload: Mapping[str, Any], requested_city: str) -> WeatherSnapshot:
    """
    Map a current-weather response to a snapshot with an empty forecast.

    Raises:
        MalformedResponse: If main.temp or main.humidity cannot be read
    """
    values = apply_schema(payload, CURRENT_FIELDS, defaults={
        "location_name": requested_city,
        "timestamp": int(time.time()),
    })
    if values["feels_like"] is None:
        values["feels_like"] = values["temp"]
    snapshot = WeatherSnapshot(**values)
    logging.info(f"Parsed current weather: {snapshot.location_name} {snapshot.temp}, {snapshot.condition}")
    return snapshot


def map_forecast_list(payload: Mapping[str, Any], limit: int = MAX_FORECAST_POINTS) -> List[ForecastPoint]:
    """
    Map the first ``limit`` entries of a forecast response, in provider order.

    A missing ``list`` yields an empty forecast. Any entry lacking ``dt`` or
    ``main.temp`` aborts the whole mapping.

    Raises:
        MalformedResponse: If ``list`` is not an array or an entry is invalid
    """
    entries = payload.get("list")
    if entries is None:
        logging.warning("Forecast response has no 'list'; returning an empty forecast")
        return []
    if not isinstance(entries, list):
        raise MalformedResponse("list", "is not an array")

    points = []
    for index, entry in enumerate(entries[:limit]):
        where = f"list[{index}]"
        if not isinstance(entry, Mapping):
            raise MalformedResponse(where, "is not an object")
        points.append(ForecastPoint(**apply_schema(entry, FORECAST_FIELDS, where=where)))
    logging.debug(f"Parsed {len(points)} of {len(entries)} forecast entries")
    return points
