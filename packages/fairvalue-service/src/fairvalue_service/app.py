"""
Application factory and FastAPI app configuration.

Settings are read once, when the app is created, and kept on
``app.state.settings`` for the routes.
"""

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fairvalue_service.api.router import router as api_router
from fairvalue_service.config import Settings

logger = logging.getLogger("fairvalue_service")


async def log_requests(request: Request, call_next):
    """Log each request with its status and latency; unhandled errors become a 500."""
    route = f"{request.method} {request.url.path}"
    logger.info(f"Incoming request: {route}")
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Request failed: {route} after {time.perf_counter() - started:.4f}s Error: {e}")
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    logger.info(f"Request completed: {route} Status: {response.status_code} Time: {time.perf_counter() - started:.4f}s")
    return response


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level.upper())

    application = FastAPI(
        title="FairValue API",
        version="0.1.0",
        description="Dividend monitor with Bazin and Graham fair-value estimates",
    )
    application.state.settings = settings
    application.include_router(api_router)
    application.middleware("http")(log_requests)

    @application.get("/")
    def read_root():
        return {"message": "FairValue API is running"}

    return application


# Module-level app instance for uvicorn
app = create_app()
