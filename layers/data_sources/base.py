"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Protocol

from layers.data_sources.open_meteo_client import GeoLocation


class ForecastDataSource(Protocol):
    """Interface for anything that can geocode a ZIP and return forecast JSON."""

    def geocode(self, zip_code: str) -> GeoLocation | None:
        """Return the location for a ZIP code, or None when unknown."""
        ...

    def fetch_forecast(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "auto",
    ) -> Dict[str, Any]:
        """Return an Open-Meteo style forecast payload."""
        ...


@dataclass
class CallableForecastDataSource(ForecastDataSource):
    """Wrap two callables so they can be swapped for different backends."""

    geocoder: Callable[..., GeoLocation | None]
    forecaster: Callable[..., Dict[str, Any]]

    def geocode(self, *args, **kwargs) -> GeoLocation | None:
        """Delegate to the configured geocoding callable."""
        return self.geocoder(*args, **kwargs)

    def fetch_forecast(self, *args, **kwargs) -> Dict[str, Any]:
        """Delegate to the configured forecast callable."""
        return self.forecaster(*args, **kwargs)
