"""HTTP API for the clothing recommendation service."""

import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel

from layers.domain import Diagnostics, VisualPayload
from .config import settings
from .data_sources import build_data_source
from .forecast_service import LayersReport, get_layers_report
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="layers/api")

UPSTREAM_APOLOGY = "Sorry, I had trouble getting the weather information for that location."


def require_api_key(x_api_key: str | None = Header(default=None)):
    """
    Validate the X-API-Key header against the configured api_key setting.
    """
    # If no key is configured, allow requests (dev/default mode).
    if not settings.api_key:
        logger.debug("No API key configured; allowing all requests")
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)


class LayersResponse(BaseModel):
    """Response body consumed by the voice skill and its display."""
    response: str                      # full spoken text
    temperature: int
    weather_description: str
    recommendation: str
    later_changes: str = ""
    location_name: str | None = None
    apl: VisualPayload
    diagnostics: Diagnostics | None = None


class ErrorResponse(BaseModel):
    """Static apology returned when the forecast could not be fetched."""
    response: str = UPSTREAM_APOLOGY


def _to_response(report: LayersReport) -> LayersResponse:
    """Convert a LayersReport into the serialized API shape."""
    result = report.result
    return LayersResponse(
        response=result.spoken_text,
        temperature=result.temperature,
        weather_description=result.weather_description,
        recommendation=result.recommendation,
        later_changes=result.later_today_summary,
        location_name=report.location_name or report.zip_code,
        apl=result.visual_payload,
        diagnostics=result.diagnostics,
    )


@router.get("/layers", response_model=LayersResponse, responses={500: {"model": ErrorResponse}})
def get_layers(zip_code: str | None = Query(default=None, alias="zip", max_length=16)):
    """Return today's clothing recommendation for a ZIP code."""
    zip_code = (zip_code or "").strip() or settings.default_zip
    logger.info(f"Layers request for {zip_code}")

    report = get_layers_report(zip_code, data_source=DATA_SOURCE)
    logger.debug(f"Recommendation: {report.result.spoken_text}")
    return _to_response(report)
