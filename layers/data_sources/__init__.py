"""Data source factories for plugging different forecast backends."""

from .base import CallableForecastDataSource, ForecastDataSource
from .factory import build_data_source
from .file_source import JsonFileForecastDataSource
from .open_meteo_client import (
    GeoLocation,
    fetch_forecast,
    geocode_zip,
)

__all__ = [
    "build_data_source",
    "JsonFileForecastDataSource",
    "ForecastDataSource",
    "CallableForecastDataSource",
    "GeoLocation",
    "fetch_forecast",
    "geocode_zip",
]
