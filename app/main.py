from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging

from app.api.v1.router import router as api_v1_router
from app.core.exceptions import (
    AgentNotEligibleError,
    AgentNotFoundError,
    DealNotFoundError,
    RatingRecalculationTimeoutError,
)
from app.core.config import settings as app_settings
from app.core.rate_limit import limiter
from app.services.rating_scheduler import RatingRecalculationJob
from app.core.database import AsyncSessionLocal

# Configure logging
logging.basicConfig(level=app_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Process-wide owner of the periodic re-rating; manual triggers share it
rating_job = RatingRecalculationJob(AsyncSessionLocal)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the rating recalculation loop with the app, stop it on exit."""
    if app_settings.RATING_SCHEDULER_ENABLED:
        rating_job.start()
        logger.info("Background rating recalculation task scheduled")
    yield
    await rating_job.stop()


app = FastAPI(
    title="Agent Performance CRM",
    description="Deal ledger and agent performance ratings",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.rating_job = rating_job

# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.exception_handler(AgentNotFoundError)
async def agent_not_found_handler(request: Request, exc: AgentNotFoundError):
    logger.warning("Agent not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "agent_not_found"},
    )


@app.exception_handler(AgentNotEligibleError)
async def agent_not_eligible_handler(request: Request, exc: AgentNotEligibleError):
    logger.warning("Agent not eligible: %s", exc.detail)
    return JSONResponse(
        status_code=409,
        content={"detail": exc.detail, "type": "agent_not_eligible"},
    )


@app.exception_handler(DealNotFoundError)
async def deal_not_found_handler(request: Request, exc: DealNotFoundError):
    logger.warning("Deal not found: %s", exc.detail)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "deal_not_found"},
    )


@app.exception_handler(RatingRecalculationTimeoutError)
async def recalculation_timeout_handler(
    request: Request, exc: RatingRecalculationTimeoutError
):
    logger.error("Rating recalculation timed out: %s", exc.detail)
    return JSONResponse(
        status_code=504,
        content={"detail": exc.detail, "type": "rating_recalculation_timeout"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_encoder(exc.errors()),
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected internal error occurred. Please try again later.",
            "type": "internal_server_error",
        },
    )
