"""
Homestock — FastAPI Application

RPC-style endpoints consumed by the web client:
    POST /get_price_stats   {item_id, range?} -> {history, stats}
    POST /fetch_prices      cron trigger for the daily price fetch
    GET  /health

Every error leaves as {"error": "..."}: 400 for a missing item id or an
invalid body, 500 when the observation store is unavailable.
Routing errors such as 404 and 405 keep their status with the same body.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from homestock.api.routes import router
from homestock.config import settings
from homestock.exceptions import HomestockError, MissingIdentifier, UpstreamUnavailable

logger = structlog.get_logger(__name__)

# Map exceptions to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[HomestockError], int] = {
    MissingIdentifier: status.HTTP_400_BAD_REQUEST,
    UpstreamUnavailable: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    """Render domain and validation errors as {"error": ...} bodies."""

    @app.exception_handler(HomestockError)
    async def homestock_error_handler(request: Request, exc: HomestockError) -> JSONResponse:
        status_code = EXCEPTION_STATUS_MAP.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.warning(
            "request_failed",
            path=request.url.path,
            error_code=exc.code,
            error=exc.message,
            status_code=status_code,
        )
        return _error(status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        logger.warning("request_invalid", path=request.url.path, errors=errors)
        return _error(status.HTTP_400_BAD_REQUEST, "; ".join(errors) or "Invalid request")

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error(exc.status_code, exc.detail or "An error occurred", headers=exc.headers)


def create_app() -> FastAPI:
    app = FastAPI(title="Homestock", version="0.1.0")

    origins = [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
