"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app and attach its ``Database`` to ``app.state``.
* Register CORS middleware, request logging and the JSON error handlers.
* Mount the feature routers (auth, users, products, orders) under /api.
* Expose a /health endpoint for container liveness checks.

Run locally with ``python backend/main.py`` or ``uvicorn main:app``
from the backend/ directory.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from auth.router import router as auth_router
from users.router import router as users_router
from products.router import router as products_router
from orders.router import router as orders_router
from core.config import settings
from core.errors import register_exception_handlers
from core.logger import logger
from core.security import get_client_ip
from database import Database

API_PREFIX = "/api"


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Request bodies (passwords) and the Authorization header are never echoed.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            # Unhandled errors still get an access line before propagating
            self._log(request, 500, start)
            raise
        self._log(request, response.status_code, start)
        return response

    @staticmethod
    def _log(request: Request, status_code: int, start: float) -> None:
        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            get_client_ip(request),
            status_code,
            (time.perf_counter() - start) * 1000,
        )


@asynccontextmanager
async def _lifespan(app: FastAPI):
    if settings.is_development and settings.secret_key_is_default:
        logger.warning("Using the development SECRET_KEY; never deploy with it")
    app.state.database.create_all()
    logger.info("Sahyog Medical API starting up (env=%s)", settings.app_env)
    yield
    app.state.database.dispose()
    logger.info("Sahyog Medical API shutting down")


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.  *database* defaults to one opened on
    ``settings.database_url``; tests pass their own.
    """
    app = FastAPI(title="Sahyog Medical Store", version="1.0.0", lifespan=_lifespan)
    app.state.database = database or Database(settings.database_url)

    # -----------------------------------------------------------------------
    # CORS
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(_RequestLogMiddleware)

    register_exception_handlers(app)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(products_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)

    # -----------------------------------------------------------------------
    # Health check
    # -----------------------------------------------------------------------
    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # log_config=None keeps the configuration applied by core.logger
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)
