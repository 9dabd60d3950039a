"""Helpers for geocoding ZIP codes and fetching forecasts from the Open-Meteo APIs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import requests
from retry_requests import retry

from layers.config import settings
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='open_meteo_client')

# retries only; upstream responses are never cached
session = retry(
    requests.Session(),
    retries=settings.retry_attempts,
    backoff_factor=settings.retry_backoff_factor,
)

OPEN_METEO_GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"

HOURLY_VARS = [
    "temperature_2m",
    "relativehumidity_2m",
    "precipitation",
    "windspeed_10m",
    "weathercode",
]
DAILY_VARS = ["uv_index_max", "sunrise", "sunset"]

EXPECTED_HOURLY_UNITS = {
    "temperature_2m": "°F",
    "relativehumidity_2m": "%",
    "precipitation": "inch",
    "windspeed_10m": "mp/h",
}

# Acceptable alternative spellings that should not trigger warnings.
ALLOWED_HOURLY_UNIT_SYNONYMS = {
    "temperature_2m": {"°F"},
    "relativehumidity_2m": {"%", "percent"},
    "precipitation": {"inch", "in"},
    "windspeed_10m": {"mp/h", "mph"},
}


@dataclass
class GeoLocation:
    """First geocoding match for a ZIP code."""
    latitude: float
    longitude: float
    name: str | None = None
    timezone: str | None = None


def _warn_on_unexpected_units(units: dict, *, context: str):
    """Log a warning if Open-Meteo returns units we did not request."""
    if not units:
        return
    for field, expected in EXPECTED_HOURLY_UNITS.items():
        actual = units.get(field)
        if not actual or actual == expected:
            continue
        allowed = ALLOWED_HOURLY_UNIT_SYNONYMS.get(field, set())
        if actual not in allowed:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": expected, "allowed": sorted(allowed)},
            )


def geocode_zip(zip_code: str, *, timeout: float | None = None) -> GeoLocation | None:
    """Resolve a ZIP code to coordinates; returns None when nothing matches."""
    params = {
        "name": zip_code,
        "count": 1,
        "language": "en",
        "format": "json",
    }

    resp = session.get(OPEN_METEO_GEOCODING_URL, params=params, timeout=timeout or settings.request_timeout_seconds)
    resp.raise_for_status()
    data = resp.json() or {}
    if not isinstance(data, dict):
        raise ValueError(f"Geocoding response is not a JSON object: {type(data).__name__}")

    results = data.get("results") or []
    if not results:
        logger.info("No geocoding match", extra={"zip": zip_code})
        return None

    first = results[0]
    location = GeoLocation(
        latitude=first["latitude"],
        longitude=first["longitude"],
        name=first.get("name"),
        timezone=first.get("timezone"),
    )
    logger.debug("Geocoded ZIP", extra={"zip": zip_code, "location_name": location.name})
    return location


def fetch_forecast(latitude: float,
                   longitude: float,
                   *,
                   timezone: str = "auto",
                   forecast_days: int | None = None,
                   timeout: float | None = None,
                   ) -> Dict[str, Any]:
    """Fetch current + hourly + daily forecast JSON in Fahrenheit, mph and inches."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(HOURLY_VARS),
        "daily": ",".join(DAILY_VARS),
        "current_weather": "true",
        "timezone": timezone,
        "forecast_days": forecast_days or settings.forecast_days,
        "temperature_unit": "fahrenheit",
        "windspeed_unit": "mph",
        "precipitation_unit": "inch",
    }

    logger.info("Fetching Open-Meteo forecast", extra={"latitude": latitude, "longitude": longitude})
    resp = session.get(OPEN_METEO_WEATHER_URL, params=params, timeout=timeout or settings.request_timeout_seconds)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise ValueError(f"Forecast response is not a JSON object: {type(data).__name__}")

    _warn_on_unexpected_units(data.get("hourly_units") or {}, context="forecast_hourly")
    return data
