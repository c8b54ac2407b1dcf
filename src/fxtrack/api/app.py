"""FastAPI application factory and error mapping."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fxtrack.api import routes
from fxtrack.exceptions import NotFoundOrUnauthorized, ProviderError, Unauthenticated

log = structlog.get_logger(__name__)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def _not_found(request: Request, exc: NotFoundOrUnauthorized) -> JSONResponse:
    return _error(404, exc)


async def _unauthenticated(request: Request, exc: Unauthenticated) -> JSONResponse:
    return _error(401, exc)


async def _provider_failed(request: Request, exc: ProviderError) -> JSONResponse:
    log.warning("provider_error", path=request.url.path, error=str(exc))
    return _error(502, exc)


async def _invalid_input(request: Request, exc: ValueError) -> JSONResponse:
    return _error(422, exc)


def create_app(lifespan: Any = None) -> FastAPI:
    """Create the API application.

    Args:
        lifespan: Optional async context manager for startup/shutdown. main.py
                  uses it to wire components onto app.state.

    Returns:
        FastAPI app with routes under /api. Route handlers expect
        ``app.state.forex``, ``app.state.preferences`` and ``app.state.news``.
    """
    app = FastAPI(title="FX Rate Tracker", lifespan=lifespan)

    app.add_exception_handler(NotFoundOrUnauthorized, _not_found)
    app.add_exception_handler(Unauthenticated, _unauthenticated)
    app.add_exception_handler(ProviderError, _provider_failed)
    app.add_exception_handler(ValueError, _invalid_input)

    app.include_router(routes.router, prefix="/api")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app
