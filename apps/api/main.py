"""
Training Plan Engine API.

Wires settings, logging, CORS, request timing and error handlers around
the plan generation router.
"""
import logging
import time
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.exceptions import APIException
from core.logging import setup_logging
from routers import plan_generation

setup_logging()
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

LOCAL_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _allowed_origins() -> List[str]:
    """Everything in DEBUG, CORS_ORIGINS when set, local dev servers otherwise."""
    if settings.DEBUG:
        return ["*"]
    return settings.cors_origin_list() or LOCAL_ORIGINS


app = FastAPI(
    title="Training Plan Engine API",
    description="Personalized running plans: VDOT, A1-A6 pace zones, periodization and session scheduling",
    version=API_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    """One log line per request, plus an X-Process-Time header (ms)."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} in {elapsed_ms} ms",
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time_ms": elapsed_ms,
            }
        }
    )
    response.headers["X-Process-Time"] = str(elapsed_ms)
    return response


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    logger.warning(
        f"{exc.error_code}: {exc.detail}",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "status_code": exc.status_code,
                "error_code": exc.error_code,
            }
        }
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything not raised on purpose: log with traceback, answer 500."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"extra_fields": {"method": request.method, "path": request.url.path}}
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error_code": "INTERNAL_ERROR"},
    )


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "version": API_VERSION,
        "environment": settings.ENVIRONMENT,
        "advanced_distance_km": [settings.ADVANCED_MIN_DISTANCE_KM, settings.ADVANCED_MAX_DISTANCE_KM],
        "timestamp": time.time(),
    }


app.include_router(plan_generation.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )
