"""Fetch, parse and analyze the forecast for a ZIP code."""
from __future__ import annotations

from dataclasses import dataclass

import requests

from layers.data_sources import ForecastDataSource, build_data_source
from layers.errors import InvalidDataset, UpstreamUnavailable
from layers.forecast import ForecastDataset, parse_forecast_payload
from layers.recommendation_engine import analyze_forecast
from layers.domain import RecommendationResult
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="layers/forecast_service")


@dataclass
class LayersReport:
    """Engine result plus the location it was computed for."""
    zip_code: str
    location_name: str | None
    dataset: ForecastDataset
    result: RecommendationResult


def load_dataset(zip_code: str, data_source: ForecastDataSource) -> ForecastDataset:
    """
    Geocode `zip_code`, fetch its forecast and parse it into a ForecastDataset.

    Network, decoding and missing-block problems surface as UpstreamUnavailable;
    misaligned hourly arrays surface as InvalidDataset.
    """
    try:
        location = data_source.geocode(zip_code)
        if location is None:
            raise UpstreamUnavailable(f"Could not find lat/long for ZIP code {zip_code!r}")

        payload = data_source.fetch_forecast(location.latitude, location.longitude, timezone="auto")
    except requests.RequestException as exc:
        logger.error("Open-Meteo request failed", extra={"zip": zip_code, "error": str(exc)})
        raise UpstreamUnavailable(str(exc)) from exc
    except (ValueError, KeyError, OSError) as exc:
        logger.error("Could not decode forecast data", extra={"zip": zip_code, "error": str(exc)})
        raise UpstreamUnavailable(str(exc)) from exc

    if not isinstance(payload, dict) or not payload.get("current_weather"):
        raise UpstreamUnavailable("No current_weather data from Open-Meteo.")

    try:
        return parse_forecast_payload(payload, location_name=location.name)
    except InvalidDataset:
        logger.error("Forecast hourly arrays are inconsistent", extra={"zip": zip_code})
        raise
    except (KeyError, TypeError, AttributeError) as exc:
        raise UpstreamUnavailable(f"Malformed forecast payload: {exc}") from exc


def get_layers_report(zip_code: str, *, data_source: ForecastDataSource | None = None) -> LayersReport:
    """Run the full fetch -> parse -> analyze pipeline for one ZIP code."""
    ds = data_source or build_data_source()
    logger.info("Building layers report", extra={"zip": zip_code})

    dataset = load_dataset(zip_code, ds)
    result = analyze_forecast(dataset)

    return LayersReport(
        zip_code=zip_code,
        location_name=dataset.location_name,
        dataset=dataset,
        result=result,
    )


def main():
    """Manual test helper for the report pipeline."""
    import sys

    zip_code = sys.argv[1] if len(sys.argv) > 1 else "98102"
    report = get_layers_report(zip_code)
    print(f"location: {report.location_name}\n"
          f"    category: {report.result.temperature_category.value}\n"
          f"    effective temperature: {report.result.effective_temperature:.1f} F\n"
          f"    background: {report.result.visual_payload.background.value}\n"
          f"    clothing: {', '.join(c.item for c in report.result.visual_payload.clothing_items)}\n"
          f"    spoken: {report.result.spoken_text}\n")


if __name__ == "__main__":
    main()
