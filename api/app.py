"""
FastAPI relay for the Rockfall Prediction System.

Endpoints:
  GET  /             - Service descriptor
  GET  /api/health   - Relay and scoring service health
  POST /api/predict  - Forward slope/rainfall/temperature to the scoring service
  GET  /api/history  - Prediction history (placeholder)
  GET  /metrics      - Prometheus metrics
"""

import time
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from api.schemas import (
    ErrorResponse,
    HealthResponse,
    HistoryResponse,
    PredictionResponse,
    ServiceInfo,
    parse_prediction_request,
)
from relay import __version__
from relay.config import RelayConfig
from relay.errors import UNAVAILABLE_MESSAGE, InputValidationError, RelayError
from relay.scoring import ScoringClient

SERVICE_NAME = "Rockfall Prediction API"

CONFIG = RelayConfig.load()

# ---------------------------------------------------------------------------
# Logging Configuration
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(CONFIG.log_file, mode="a"),
    ],
)
logger = logging.getLogger("rockfall-relay")

# ---------------------------------------------------------------------------
# Prometheus Metrics
# ---------------------------------------------------------------------------
REQUEST_COUNT = Counter(
    "relay_requests_total",
    "Total number of relay requests",
    ["endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "relay_request_latency_seconds",
    "Latency of relay requests in seconds, upstream round trip included",
    ["endpoint"],
)
UPSTREAM_ERRORS = Counter(
    "relay_upstream_errors_total",
    "Failed calls to the ML scoring service",
    ["endpoint", "kind"],
)
RISK_LEVELS = Counter(
    "relay_risk_levels_total",
    "Count of risk levels returned by the scoring service",
    ["risk_level"],
)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_scoring_client(request: Request) -> ScoringClient:
    return request.app.state.scoring_client


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Translate a RelayError into the client-facing JSON envelope."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api")


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude={"error"},
    responses={503: {"model": HealthResponse}},
)
def health_check(client: ScoringClient = Depends(get_scoring_client)):
    """
    Report relay health together with the scoring service's own health.

    Any failure to reach the scoring service degrades the status to
    "degraded" with a 503 instead of raising.
    """
    try:
        upstream = client.health()
    except RelayError as e:
        REQUEST_COUNT.labels(endpoint="/api/health", status="degraded").inc()
        UPSTREAM_ERRORS.labels(endpoint="/api/health", kind=type(e).__name__).inc()
        logger.warning(f"Scoring service health check failed: {e}")
        degraded = HealthResponse(
            status="degraded",
            backend="online",
            pythonML="offline",
            error=UNAVAILABLE_MESSAGE,
        )
        return JSONResponse(status_code=503, content=degraded.model_dump(exclude_none=True))

    REQUEST_COUNT.labels(endpoint="/api/health", status="success").inc()
    return HealthResponse(status="healthy", backend="online", pythonML=upstream)


@router.post(
    "/predict",
    response_model=PredictionResponse,
    responses={
        400: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
def predict(
    payload: Any = Body(None),
    client: ScoringClient = Depends(get_scoring_client),
):
    """
    Validate the three inputs and forward them to the scoring service.

    Accepts: {slope, rainfall, temperature} as numbers or numeric strings.
    Returns: the scoring service's payload wrapped with success and timestamp.
    """
    start_time = time.time()
    logger.info("Prediction request received")

    try:
        features = parse_prediction_request(payload)
        result = client.predict(features.model_dump())
    except InputValidationError as e:
        REQUEST_COUNT.labels(endpoint="/api/predict", status="rejected").inc()
        logger.warning(f"Prediction request rejected: {e}")
        raise
    except RelayError as e:
        REQUEST_COUNT.labels(endpoint="/api/predict", status="error").inc()
        REQUEST_LATENCY.labels(endpoint="/api/predict").observe(time.time() - start_time)
        UPSTREAM_ERRORS.labels(endpoint="/api/predict", kind=type(e).__name__).inc()
        logger.error(f"Prediction error: status={e.status_code}, error={e}")
        raise

    latency = time.time() - start_time
    REQUEST_COUNT.labels(endpoint="/api/predict", status="success").inc()
    REQUEST_LATENCY.labels(endpoint="/api/predict").observe(latency)

    risk_level = result.get("risk_level") if isinstance(result, dict) else None
    if risk_level is not None:
        RISK_LEVELS.labels(risk_level=str(risk_level)).inc()

    logger.info(
        f"Prediction received: risk_level={risk_level}, "
        f"latency={latency:.4f}s"
    )

    timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return PredictionResponse(success=True, data=result, timestamp=timestamp)


@router.get("/history", response_model=HistoryResponse)
def history():
    """Prediction history placeholder; nothing is stored yet."""
    REQUEST_COUNT.labels(endpoint="/api/history", status="success").inc()
    return HistoryResponse(message="History feature coming soon", data=[])


def root():
    """Root endpoint with API info."""
    return ServiceInfo(
        service=SERVICE_NAME,
        version=__version__,
        endpoints={
            "health": "GET /api/health",
            "predict": "POST /api/predict",
            "history": "GET /api/history",
            "metrics": "GET /metrics",
        },
    )


def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


# ---------------------------------------------------------------------------
# App Initialization
# ---------------------------------------------------------------------------

def create_app(config: RelayConfig, scoring_client: Optional[ScoringClient] = None) -> FastAPI:
    """
    Build the relay application.

    Args:
        config: Relay configuration, read once at process start.
        scoring_client: Client for the scoring service. Built from `config`
            when omitted.

    Returns:
        A FastAPI app with the relay routes, CORS and error handling wired in.
    """
    application = FastAPI(
        title=SERVICE_NAME,
        description="Relay between the rockfall risk form and the ML scoring service",
        version=__version__,
    )
    application.state.config = config
    application.state.scoring_client = scoring_client or ScoringClient(
        config.upstream_url, timeout=config.upstream_timeout
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(RelayError, relay_error_handler)

    application.include_router(router)
    application.add_api_route("/", root, methods=["GET"], response_model=ServiceInfo)
    application.add_api_route("/metrics", metrics, methods=["GET"])

    @application.on_event("shutdown")
    def close_scoring_client():
        application.state.scoring_client.close()

    return application


app = create_app(CONFIG)


def main():
    logger.info(f"Relay running on http://{CONFIG.host}:{CONFIG.port}")
    logger.info(f"ML scoring service: {CONFIG.upstream_url} (timeout={CONFIG.upstream_timeout}s)")
    logger.info("API Endpoints:")
    logger.info("   - Health:  GET  /api/health")
    logger.info("   - Predict: POST /api/predict")
    logger.info("   - History: GET  /api/history")
    uvicorn.run(app, host=CONFIG.host, port=CONFIG.port)


if __name__ == "__main__":
    main()
