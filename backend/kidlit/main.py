import logging
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from kidlit.api.main import api_router
from kidlit.core.config import Settings, get_settings
from kidlit.core.cors import OriginPolicy, OriginPolicyMiddleware
from kidlit.core.identity import build_identity_store
from kidlit.core.logging_config import setup_logging
from kidlit.models import ServiceInfo

logger = logging.getLogger(__name__)


class SPAStaticFiles(StaticFiles):
    """Static files that fall back to index.html for client-side routes."""

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404 or path.startswith("api/"):
                raise
            return await super().get_response("index.html", scope)


def create_app(settings: Settings) -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.PROJECT_NAME)
    app.state.settings = settings
    app.state.identity_store = build_identity_store(settings)

    app.add_middleware(OriginPolicyMiddleware, policy=OriginPolicy(settings.allowed_origins))

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.include_router(api_router, prefix="/api")

    static_dir = settings.static_dir
    if static_dir.is_dir():
        logger.info("Serving static files from: %s", static_dir.resolve())
        app.mount("/", SPAStaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning("Client build directory not found at: %s", static_dir.resolve())

        @app.get("/", response_model=ServiceInfo)
        async def service_info() -> ServiceInfo:
            return ServiceInfo(
                service=settings.PROJECT_NAME,
                routes=["/api/health", "/api/students"],
            )

    return app


app = create_app(get_settings())


def run() -> None:
    settings = app.state.settings
    logger.info("Server running on port %s", settings.PORT)
    # No drain period: a termination signal stops the server straight away.
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        timeout_graceful_shutdown=0,
        log_config=None,
    )


if __name__ == "__main__":
    run()
