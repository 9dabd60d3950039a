"""Immutable forecast dataset and its ingestion from Open-Meteo JSON.

The recommendation engine only ever sees a `ForecastDataset`. Everything that
can be wrong with the provider payload (missing blocks, misaligned hourly
arrays, unparseable timestamps) is caught here, before the engine runs.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from layers.errors import InvalidDataset
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast")

DEFAULT_HUMIDITY = 50.0
DEFAULT_PRECIPITATION = 0.0
DEFAULT_UV_INDEX = 3.0
UNKNOWN_WEATHER = "Mixed Conditions"

# WMO weather interpretation codes as returned by Open-Meteo
WEATHER_DESCRIPTIONS = {
    0: "Clear Sky",
    1: "Mainly Clear",
    2: "Partly Cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Foggy with Rime",
    51: "Light Drizzle",
    53: "Moderate Drizzle",
    55: "Heavy Drizzle",
    56: "Light Freezing Drizzle",
    57: "Dense Freezing Drizzle",
    61: "Light Rain",
    63: "Moderate Rain",
    65: "Heavy Rain",
    66: "Light Freezing Rain",
    67: "Heavy Freezing Rain",
    71: "Light Snow",
    73: "Moderate Snow",
    75: "Heavy Snow",
    77: "Snow Grains",
    80: "Light Rain Showers",
    81: "Moderate Rain Showers",
    82: "Violent Rain Showers",
    85: "Light Snow Showers",
    86: "Heavy Snow Showers",
    95: "Thunderstorm",
    96: "Thunderstorm with Light Hail",
    99: "Thunderstorm with Heavy Hail",
}


def describe_weather_code(code: Optional[int]) -> str:
    """Convert a WMO weather code into a short human-readable description."""
    if code is None:
        return UNKNOWN_WEATHER
    try:
        return WEATHER_DESCRIPTIONS.get(int(code), UNKNOWN_WEATHER)
    except (TypeError, ValueError):
        return UNKNOWN_WEATHER


@dataclass(frozen=True)
class CurrentWeather:
    """Current conditions block (°F, mph)."""
    time: dt.datetime
    temperature: float
    wind_speed: float
    weather_code: Optional[int] = None


@dataclass(frozen=True)
class HourlySeries:
    """Parallel hourly sequences sharing one index.

    Optional measures that the provider did not return are stored as a tuple of
    None values with the same length as `time`.
    """
    time: Tuple[dt.datetime, ...]
    temperature: Tuple[Optional[float], ...]
    humidity: Tuple[Optional[float], ...]
    precipitation: Tuple[Optional[float], ...]
    wind_speed: Tuple[Optional[float], ...]
    weather_code: Tuple[Optional[int], ...]

    def __post_init__(self):
        """Reject misaligned arrays and out-of-order timestamps."""
        expected = len(self.time)
        for name in ("temperature", "humidity", "precipitation", "wind_speed", "weather_code"):
            actual = len(getattr(self, name))
            if actual != expected:
                raise InvalidDataset(f"hourly.{name} has {actual} entries, expected {expected}")
        for prev, curr in zip(self.time, self.time[1:]):
            if curr < prev:
                raise InvalidDataset(f"hourly.time decreases at {curr.isoformat()}")

    def __len__(self) -> int:
        return len(self.time)

    @classmethod
    def empty(cls) -> HourlySeries:
        return cls(time=(), temperature=(), humidity=(), precipitation=(), wind_speed=(), weather_code=())

    def humidity_at(self, index: Optional[int]) -> float:
        """Relative humidity at `index`, or the 50% fallback."""
        return _value_or(self.humidity, index, DEFAULT_HUMIDITY)

    def precipitation_at(self, index: Optional[int]) -> float:
        """Precipitation (inches) at `index`, or 0."""
        return _value_or(self.precipitation, index, DEFAULT_PRECIPITATION)

    def wind_speed_at(self, index: Optional[int]) -> float:
        """Wind speed (mph) at `index`, or 0."""
        return _value_or(self.wind_speed, index, 0.0)


@dataclass(frozen=True)
class DailySummary:
    """First-day extremes; every field may be absent."""
    uv_index_max: Optional[float] = None
    sunrise: Optional[dt.datetime] = None
    sunset: Optional[dt.datetime] = None


@dataclass(frozen=True)
class ForecastDataset:
    """Everything the engine needs for one location and one request."""
    current: CurrentWeather
    hourly: HourlySeries = field(default_factory=HourlySeries.empty)
    daily: Optional[DailySummary] = None
    location_name: Optional[str] = None
    timezone: Optional[str] = None

    @property
    def uv_index(self) -> float:
        """Daily max UV index, or the moderate fallback."""
        if self.daily is None or self.daily.uv_index_max is None:
            return DEFAULT_UV_INDEX
        return self.daily.uv_index_max

    @property
    def is_daytime(self) -> bool:
        """True when the current time is within sunrise..sunset (inclusive)."""
        if self.daily is None:
            return True
        return is_time_between(self.current.time, self.daily.sunrise, self.daily.sunset)


def _value_or(values: Sequence[Optional[float]], index: Optional[int], default: float) -> float:
    """Index-aligned read that falls back when the index or value is missing."""
    if index is None or index < 0 or index >= len(values):
        return default
    value = values[index]
    return default if value is None else value


def is_time_between(now: dt.datetime, sunrise: Optional[dt.datetime], sunset: Optional[dt.datetime]) -> bool:
    """Daytime check; without sunrise/sunset assume daytime."""
    if sunrise is None or sunset is None:
        return True
    return sunrise <= now <= sunset


def _resolve_tz(tz_name: Optional[str]) -> Optional[ZoneInfo]:
    """Return a ZoneInfo for the provider's timezone name, if it is known."""
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone from provider; using naive local times", extra={"timezone": tz_name})
        return None


def _parse_time(value: Any, tzinfo: Optional[ZoneInfo]) -> dt.datetime:
    """Interpret an Open-Meteo local time string as being in `tzinfo`."""
    try:
        parsed = dt.datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise InvalidDataset(f"Unparseable timestamp: {value!r}") from exc
    if tzinfo is not None and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tzinfo)
    return parsed


def _first(values: Any) -> Any:
    """First element of a daily array, or None."""
    if not values:
        return None
    return values[0]


def _series(hourly: Mapping[str, Any], key: str, length: int) -> Tuple[Any, ...]:
    """Hourly array for `key`, or a None-filled placeholder when absent."""
    values = hourly.get(key)
    if values is None:
        return (None,) * length
    return tuple(values)


def parse_forecast_payload(data: Mapping[str, Any], *, location_name: str | None = None) -> ForecastDataset:
    """Build a ForecastDataset from an Open-Meteo `/v1/forecast` response.

    Raises KeyError when the `current_weather` block is missing (the caller
    treats that as an upstream failure) and InvalidDataset when the hourly
    arrays cannot be index-aligned.
    """
    tz_name = data.get("timezone")
    tzinfo = _resolve_tz(tz_name)

    current_raw = data["current_weather"]
    current = CurrentWeather(
        time=_parse_time(current_raw["time"], tzinfo),
        temperature=float(current_raw["temperature"]),
        wind_speed=float(current_raw.get("windspeed") or 0.0),
        weather_code=current_raw.get("weathercode"),
    )

    hourly_raw = data.get("hourly") or {}
    times = tuple(_parse_time(t, tzinfo) for t in hourly_raw.get("time") or [])
    hourly = HourlySeries(
        time=times,
        temperature=_series(hourly_raw, "temperature_2m", len(times)),
        humidity=_series(hourly_raw, "relativehumidity_2m", len(times)),
        precipitation=_series(hourly_raw, "precipitation", len(times)),
        wind_speed=_series(hourly_raw, "windspeed_10m", len(times)),
        weather_code=_series(hourly_raw, "weathercode", len(times)),
    )

    daily_raw = data.get("daily")
    daily = None
    if daily_raw:
        sunrise = _first(daily_raw.get("sunrise"))
        sunset = _first(daily_raw.get("sunset"))
        daily = DailySummary(
            uv_index_max=_first(daily_raw.get("uv_index_max")),
            sunrise=_parse_time(sunrise, tzinfo) if sunrise else None,
            sunset=_parse_time(sunset, tzinfo) if sunset else None,
        )

    logger.debug(
        "Parsed forecast payload",
        extra={"hourly_count": len(hourly), "has_daily": daily is not None, "timezone": tz_name},
    )
    return ForecastDataset(
        current=current,
        hourly=hourly,
        daily=daily,
        location_name=location_name,
        timezone=tz_name,
    )
