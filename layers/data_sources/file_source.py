"""Replay a captured Open-Meteo forecast from disk.

Useful for development and demos without network access. The file holds the
raw `/v1/forecast` response, optionally wrapped as::

    {"location": {"latitude": 47.6, "longitude": -122.3, "name": "Seattle"},
     "forecast": {...}}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from layers.data_sources.base import ForecastDataSource
from layers.data_sources.open_meteo_client import GeoLocation
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="file_data_source")


class JsonFileForecastDataSource(ForecastDataSource):
    """Serve the same captured forecast for every ZIP code."""

    def __init__(self, path: str | Path) -> None:
        """Remember the payload path; the file is re-read on every request."""
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        """Read and decode the capture file."""
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def geocode(self, zip_code: str) -> GeoLocation | None:
        """Return the captured location, labelled with the ZIP when unnamed."""
        raw = self._load().get("location") or {}
        return GeoLocation(
            latitude=raw.get("latitude", 0.0),
            longitude=raw.get("longitude", 0.0),
            name=raw.get("name") or zip_code,
            timezone=raw.get("timezone"),
        )

    def fetch_forecast(self, latitude: float, longitude: float, *, timezone: str = "auto") -> Dict[str, Any]:
        """Return the captured forecast payload."""
        data = self._load()
        logger.debug("Loaded forecast capture", extra={"path": str(self.path)})
        return data.get("forecast", data)
