"""FastAPI application setup for the How Many Layers service."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import UPSTREAM_APOLOGY, router as api_router
from .errors import InvalidDataset, UpstreamUnavailable
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="layers/main")

app = FastAPI(title="How Many Layers")


@app.exception_handler(UpstreamUnavailable)
@app.exception_handler(InvalidDataset)
async def upstream_failure_handler(request: Request, exc: Exception):
    """Answer with the static apology when the forecast is unusable."""
    logger.warning("Returning upstream apology", extra={"path": request.url.path, "error": str(exc)})
    return JSONResponse(status_code=500, content={"response": UPSTREAM_APOLOGY})


@app.get("/healthz")
def healthz():
    """Liveness probe."""
    return {"status": "ok"}


# API routes
app.include_router(api_router, prefix="/v1")
