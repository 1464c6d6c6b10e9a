"""
api/main.py -- FastAPI application serving the CSAF validator over HTTP.

Run with:      python main.py --web
               uvicorn api.main:app --reload

Routes:
  GET  /api/v1/health     liveness and API version
  POST /api/v1/validate   run a preset or explicit tests on one document
  GET  /api/v1/tests      test ids and presets per CSAF version

Starlette runs the last registered middleware first, so a request passes
through access logging, then the Host check, CORS and finally the slowapi
rate limiter. Error bodies are built in api/errors.py.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from slowapi.middleware import SlowAPIMiddleware

from api.errors import register_error_handlers
from api.limiter import limiter
from api.models import HealthResponse
from api.routes.v1.validate import router as validate_router
from core.config import get_settings
from core.models import CsafVersion
from core.validation import get_tests

API_VERSION = "0.3.0"

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("csafvalidator.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    counts = {version.value: len(get_tests(version)) for version in CsafVersion}
    logger.info(
        "Serving CSAF validation (default preset %s, tests per version %s, limit %s)",
        settings.default_preset.value,
        counts,
        settings.validate_rate_limit,
    )
    yield
    logger.info("CSAF validator API stopped")


app = FastAPI(
    title="CSAF Validator API",
    description="Validates CSAF 2.0 and 2.1 security advisories against the tests of the CSAF standard.",
    version=API_VERSION,
    lifespan=lifespan,
)
app.state.limiter = limiter

# innermost first
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    max_age=3600,
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)


@app.middleware("http")
async def access_log(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d in %.1f ms (size %s, client %s)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
        request.headers.get("content-length", "-"),
        request.client.host if request.client else "-",
    )
    return response


register_error_handlers(app)
app.include_router(validate_router, prefix="/api/v1", tags=["Validation"])


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    return HealthResponse(version=API_VERSION)
