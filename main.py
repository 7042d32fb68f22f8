"""
Chat Relay API
FastAPI application that relays frontend conversations to an LLM provider.
"""
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay import __version__
from chat_relay.api.routers import api_router
from chat_relay.config.settings import get_settings
from chat_relay.middleware.error_handling import ErrorHandlingMiddleware, register_exception_handlers
from chat_relay.middleware.request_logging import RequestLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager."""
    # Startup
    settings = get_settings()
    logging.info(f"Starting {settings.app_name} ({settings.environment})")

    # A missing key is reported per request, not fatal at startup
    if not settings.has_api_key:
        logging.error("OPENAI_API_KEY missing! /api/chat will answer 500 until it is set")
    else:
        logging.info(f"Relaying to {settings.upstream_api} API with model {settings.openai_model}")

    app.state.http_client = httpx.AsyncClient(timeout=settings.upstream_timeout)
    try:
        yield
    finally:
        # Shutdown
        logging.info("Shutting down...")
        await app.state.http_client.aclose()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Stateless relay between a chat frontend and an LLM completion API",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    register_exception_handlers(app)
    app.add_middleware(ErrorHandlingMiddleware)
    if settings.enable_request_logging:
        app.add_middleware(RequestLoggingMiddleware)

    # CORS wraps everything, including error responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_local,
    )
