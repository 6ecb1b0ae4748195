import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from share_relay.api.middleware import CORS_HEADERS, AllowAllOriginsMiddleware
from share_relay.api.routers import blobs as blobs_router
from share_relay.api.routers import shares as shares_router
from share_relay.core.config import get_settings
from share_relay.core.errors import RelayError
from share_relay.core.logging import configure_logging
from share_relay.schemas import ErrorResponse
from share_relay.services.registry import ShareRegistry
from share_relay.services.relay import RelayService
from share_relay.services.storage import get_storage_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    async with httpx.AsyncClient(
        timeout=settings.upstream_timeout,
        follow_redirects=True,
    ) as http_client:
        app.state.relay_service = RelayService(
            app.state.registry,
            get_storage_service(),
            http_client,
        )
        logger.info("Share relay listening on %s:%d", settings.host, settings.port)
        yield


async def relay_error_handler(request: Request, exc: RelayError) -> Response:
    if exc.json_body:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=exc.message).model_dump(),
        )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


def create_app(registry: ShareRegistry | None = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.env == "prod")

    app = FastAPI(
        debug=settings.debug,
        title="Share Relay",
        lifespan=lifespan,
    )
    if registry is None:
        registry = ShareRegistry(settings.seed_records)
    app.state.registry = registry
    if settings.seed_records:
        logger.info("Seeded %d share records", len(settings.seed_records))

    # CORSMiddleware answers preflights; the outer layer stamps requests without an Origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=[CORS_HEADERS["Access-Control-Allow-Headers"]],
    )
    app.add_middleware(AllowAllOriginsMiddleware)
    app.add_exception_handler(RelayError, relay_error_handler)

    if settings.storage_backend == "local":
        app.include_router(blobs_router.router)
    app.include_router(shares_router.router)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "share_relay.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
