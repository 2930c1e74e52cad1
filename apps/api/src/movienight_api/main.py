from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from movienight_core.config import Settings, load_settings
from movienight_core.db import Store
from movienight_core.errors import MovieNightError
from movienight_core.logging_config import configure_logging
from movienight_core.tokens import RandomSource, SystemRandomSource
from .routes import movies, rooms

logger = logging.getLogger("movienight_api")

VERSION = "0.1.0"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[Store] = None,
    rng: Optional[RandomSource] = None,
) -> FastAPI:
    """Build the API. The store is opened on startup and closed on shutdown."""
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store.open()
        logger.info("api.start version=%s port=%s", app.version, settings.port)
        try:
            yield
        finally:
            app.state.store.close()
            logger.info("api.stop")

    app = FastAPI(title="Movie Night API", version=VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store or Store(settings.effective_database_url())
    app.state.rng = rng or SystemRandomSource()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Lightweight request log middleware
    @app.middleware("http")
    async def request_logger(request, call_next):  # type: ignore
        start = time.time()
        path = request.url.path
        if path.startswith("/health") or path.startswith("/api/health"):
            return await call_next(request)
        response = await call_next(request)
        duration_ms = int((time.time() - start) * 1000)
        logger.info("http %s %s -> %s (%dms)", request.method, path, response.status_code, duration_ms)
        return response

    @app.exception_handler(MovieNightError)
    async def domain_error(request: Request, exc: MovieNightError):
        logger.warning("error %s %s -> %s %s", request.method, request.url.path, exc.status_code, type(exc).__name__)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(OperationalError)
    async def store_unavailable(request: Request, exc: OperationalError):
        # Lock timeouts and lost connections; the request can simply be retried
        logger.error("error %s %s -> 503 OperationalError %s", request.method, request.url.path, exc.orig)
        return _error_response(503, "Database busy, try again")

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body") or "body"
            message = f"{field}: {first.get('msg', 'invalid value')}"
        else:
            message = "Invalid request body"
        logger.warning("error %s %s -> 400 RequestValidationError", request.method, request.url.path)
        return _error_response(400, message)

    # Served at the root and, for frontends behind a proxy, under /api
    api_router = APIRouter(prefix="/api")
    api_router.include_router(rooms.router)
    api_router.include_router(movies.router)
    app.include_router(api_router)
    app.include_router(rooms.router)
    app.include_router(movies.router)

    @app.get("/health")
    @app.get("/api/health", include_in_schema=False)
    async def health():
        return {"status": "ok", "version": app.version}

    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("api.listen http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


__all__ = ["create_app", "main", "VERSION"]
