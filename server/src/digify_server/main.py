"""Digify Attribution Server - FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from digify import Tracker
from digify_server.config import settings
from digify_server.middleware import AttributionMiddleware
from digify_server.routes import router

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage server lifecycle."""
    if not settings.email_configured:
        logger.warning("Contact email delivery not configured; submissions will not be delivered")
    logger.info("Attribution server started")

    yield

    logger.info("Server shutdown complete")


app = FastAPI(
    title="Digify Attribution Server",
    description="Cookie-carried marketing attribution and visit tracking",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.debug,
)

app.state.tracker = Tracker()
app.add_middleware(AttributionMiddleware, secure=settings.cookie_secure)
app.include_router(router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
