"""
FastAPI application serving app metadata and the catalog.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable, Dict, Optional
from uuid import uuid4

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from playshelf import __version__
from playshelf.catalog import Catalog
from playshelf.config.config import Config, settings
from playshelf.observability import export_prometheus
from playshelf.protocols import CallerInputError, DegradationReason, MetadataResult
from playshelf.service import MetadataService
from playshelf.web.cors import CorsHeadersMiddleware

logger = structlog.get_logger(__name__)

APP_ID_REQUIRED = {"error": "App ID is required"}
APP_NOT_FOUND = {"error": "App not found"}


def create_app(
    config: Optional[Config] = None,
    service: Optional[MetadataService] = None,
    catalog: Optional[Catalog] = None,
) -> FastAPI:
    """Build the API; ``service`` and ``catalog`` default to ones built from ``config``."""
    if config is None:
        config = settings
    service = service or MetadataService.from_config(config)
    catalog = catalog if catalog is not None else Catalog.from_yaml(config.catalog.path)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting PlayShelf API", version=__version__, catalog_size=len(catalog))
        app.state.start_time = time.time()
        await service.start()
        yield
        logger.info("Shutting down PlayShelf API")
        await service.close()

    app = FastAPI(title="PlayShelf", version=__version__, lifespan=lifespan)
    app.state.service = service
    app.state.catalog = catalog

    app.add_middleware(CorsHeadersMiddleware)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next: Callable) -> Any:
        """Tag each request with an id and log it."""
        start_time = time.time()
        request_id = str(uuid4())
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            response.headers["X-Process-Time"] = str(process_time)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                response_time_ms=round(process_time * 1000, 2),
            )
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")

    @app.get("/api/app")
    async def get_app_metadata(app_id: Optional[str] = Query(default=None, alias="id")) -> Response:
        """Metadata for one app; always 200 except for a missing id."""
        if app_id is None or not app_id.strip():
            return JSONResponse(APP_ID_REQUIRED, status_code=400)

        try:
            result = await service.get_app_metadata(app_id)
        except CallerInputError:
            return JSONResponse(APP_ID_REQUIRED, status_code=400)
        except Exception:
            logger.exception("Metadata request failed", app_id=app_id)
            result = MetadataResult.degrade(
                app_id.strip(),
                service.fetcher.detail_url(app_id),
                DegradationReason.PROCESSING_ERROR,
            )

        return JSONResponse(
            result.metadata.to_dict(),
            headers={"X-Metadata-Degraded": "true" if result.degraded else "false"},
        )

    @app.get("/api/apps")
    async def list_apps(
        category: Optional[str] = None,
        q: Optional[str] = None,
        featured: bool = False,
    ) -> Dict[str, Any]:
        """Catalog entries, optionally filtered by category, a search query and the featured flag."""
        entries = catalog.search(q or "", category=category, featured=featured)
        return {
            "apps": [entry.to_dict() for entry in entries],
            "categories": catalog.categories(),
        }

    @app.get("/api/apps/{app_id}")
    async def get_catalog_entry(app_id: str) -> Response:
        entry = catalog.get(app_id)
        if entry is None:
            return JSONResponse(APP_NOT_FOUND, status_code=404)
        return JSONResponse(entry.to_dict())

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": __version__,
            "catalog_size": len(catalog),
        }

    @app.get("/metrics")
    async def get_prometheus_metrics() -> Response:
        """Endpoint for Prometheus to scrape."""
        return Response(export_prometheus(), media_type=CONTENT_TYPE_LATEST)

    return app


_default_app: Optional[FastAPI] = None


def get_app() -> FastAPI:
    """Application built from ``settings``, created on first use."""
    global _default_app
    if _default_app is None:
        _default_app = create_app()
    return _default_app


def __getattr__(name: str) -> Any:
    # Resolves ``uvicorn playshelf.web.main:app`` without building an app at import time.
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def run_web_server(host: str = "127.0.0.1", port: int = 8000, config: Optional[Config] = None) -> None:
    """Function to run the FastAPI server."""
    import uvicorn

    application = create_app(config) if config is not None else get_app()
    logger.info("Starting PlayShelf web server", host=host, port=port)
    uvicorn.run(application, host=host, port=port)
