"""DevDash - API Module.

Главный HTTP роутер (префикс /api) и WebSocket роутер.
"""

from fastapi import APIRouter

from devdash.api.routes import projects, settings, system, tasks
from devdash.api.routes.websocket import router as websocket_router
from devdash.core.constants import API_PREFIX

# Главный API роутер
router = APIRouter(prefix=API_PREFIX)

router.include_router(system.router)
router.include_router(projects.router)
router.include_router(tasks.router)
router.include_router(settings.router)

__all__ = ["API_PREFIX", "router", "websocket_router"]
