"""FastAPI application factory and setup."""

import time
import uuid
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from src.book_service.api.http.app_data import ApplicationDependencies
from src.book_service.api.http.envelope import json_result
from src.book_service.api.http.routers.book import router as book_router
from src.book_service.api.utils.app_startup import configure_logging
from src.book_service.core.services import BookStore, StoreUnavailableError
from src.book_service.runtime.context import get_config

StoreFactory = Callable[[], BookStore]


def default_store_factory() -> BookStore:
    return BookStore.from_config(get_config().database)


def create_app(store_factory: StoreFactory = default_store_factory) -> FastAPI:
    """Build the application.

    The record store is created and connected during startup. If it cannot be
    reached, startup fails and the server process exits without serving.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = store_factory()
        try:
            store.connect()
        except StoreUnavailableError as e:
            logger.critical("Record store unavailable, refusing to start: {}", e)
            store.dispose()
            raise

        app.state.app_dependencies = ApplicationDependencies(book_store=store)
        logger.info("Starting up application in {} environment", get_config().app.environment)
        try:
            yield
        finally:
            logger.info("Shutting down application")
            app.state.app_dependencies = None
            store.dispose()

    app = FastAPI(
        title="Book Service",
        lifespan=lifespan,
        redirect_slashes=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.exception_handler(StarletteHTTPException)
    async def envelope_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        response = json_result(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }

        start = time.perf_counter()
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)
            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                response = json_result(500, "Internal Server Error")
            else:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

    app.include_router(book_router)
    return app


configure_logging()

app = create_app()

__all__ = ["app", "create_app", "default_store_factory"]
