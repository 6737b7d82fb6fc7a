"""API routers."""

from taskflow.routers.admin import router as admin_router
from taskflow.routers.ai import router as ai_router
from taskflow.routers.auth import router as auth_router
from taskflow.routers.tasks import router as tasks_router

__all__ = ["auth_router", "tasks_router", "admin_router", "ai_router"]
