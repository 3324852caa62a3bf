"""API routes for the Digify attribution server."""

from fastapi import APIRouter

from digify_server.routes.contact import router as contact_router
from digify_server.routes.track import router as track_router

router = APIRouter()
router.include_router(track_router)
router.include_router(contact_router)
