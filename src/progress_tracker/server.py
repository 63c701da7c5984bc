"""FastAPI application serving goal progress to the dashboard."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .asana import AsanaClientError
from .config import TrackerSettings, get_settings
from .service import ConfigurationMissingError, PeriodUnknownError, ProgressService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the tracker server."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def _service(request: Request) -> ProgressService:
    return request.app.state.service


router = APIRouter(prefix="/api")


@router.get("/quarters")
def list_quarters(request: Request):
    """Periods with goals, plus the current quarter id."""
    return _service(request).list_periods()


@router.get("/progress")
def current_progress(request: Request):
    return RedirectResponse(url=f"/api/progress/{_service(request).current_period()}")


@router.get("/progress/{period_id}")
async def get_progress(period_id: str, request: Request):
    return await _service(request).get_progress(period_id)


@router.post("/refresh/{period_id}")
async def refresh_progress(period_id: str, request: Request):
    return await _service(request).refresh(period_id)


@router.get("/cache-status")
def cache_status(request: Request):
    return _service(request).cache_status()


@router.get("/uncategorized")
@router.get("/uncategorized/{period_id}")
async def uncategorized(request: Request, period_id: Optional[str] = None):
    """Tasks no classification rule accepts, for tuning the pattern tables."""
    return await _service(request).uncategorized(period_id)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ConfigurationMissingError)
    async def _configuration_missing(_request: Request, exc: ConfigurationMissingError):
        return JSONResponse(status_code=503, content={"error": str(exc)})

    @app.exception_handler(PeriodUnknownError)
    async def _period_unknown(_request: Request, exc: PeriodUnknownError):
        return JSONResponse(status_code=404, content={"error": str(exc), "available": exc.available})

    @app.exception_handler(AsanaClientError)
    async def _source_failed(_request: Request, exc: AsanaClientError):
        logger.error("Task source request failed", extra={"error": str(exc)})
        return JSONResponse(status_code=502, content={"error": str(exc)})


def create_app(
    settings: Optional[TrackerSettings] = None,
    service: ProgressService | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application with its progress service."""

    settings = settings or get_settings()
    service = service or ProgressService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        close = getattr(service.source, "aclose", None)
        if close is not None:
            await close()

    app = FastAPI(
        title="DevRel Progress Tracker",
        description="Goal progress computed from completed Asana tasks",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.settings = settings
    app.include_router(router)
    _register_error_handlers(app)

    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.static_dir), html=True), name="dashboard")
    else:
        logger.info("Dashboard assets not found", extra={"static_dir": str(settings.static_dir)})

    return app


def main() -> None:
    """Entry point for running the tracker server via CLI."""

    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)

    app = create_app(settings)
    service: ProgressService = app.state.service
    logger.info(
        "Launching progress tracker",
        extra={
            "version": __version__,
            "host": settings.host,
            "port": settings.port,
            "periods": [period["id"] for period in service.goals.available()],
            "current_period": service.current_period(),
            "source_configured": service.source is not None,
        },
    )
    if service.source is None:
        logger.warning("ASANA_TOKEN environment variable not set")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
