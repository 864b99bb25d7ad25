"""API router aggregation."""

from fastapi import APIRouter

from agentry.routes.api import agents, settings

router = APIRouter(prefix="/api", tags=["api"])
router.include_router(agents.router)
router.include_router(settings.router)
