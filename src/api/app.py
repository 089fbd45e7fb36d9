"""FastAPI application for the completion relay.

The relay route sets its own CORS headers on every response, including the
preflight, so no app-wide CORS middleware is installed.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.chat import router as chat_router

logger = logging.getLogger(__name__)

SERVICE_NAME = "chat-relay"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    logger.info(f"{SERVICE_NAME} up, relay at /functions/v1/chat")
    yield
    logger.info(f"{SERVICE_NAME} stopped")


async def health_check() -> dict[str, str]:
    """Report that the relay process is alive."""
    return {"status": "healthy", "service": SERVICE_NAME}


def create_app() -> FastAPI:
    """Build the relay application.

    Returns:
        FastAPI app serving ``/functions/v1/chat`` and ``/health``.
    """
    application = FastAPI(title="Chat Relay API", version="0.1.0", lifespan=lifespan)
    application.include_router(chat_router)
    application.add_api_route("/health", health_check, methods=["GET"])
    return application


app = create_app()
