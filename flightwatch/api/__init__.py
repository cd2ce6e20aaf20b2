"""API routes package."""

from .routes_monitoring import router as monitoring_router
from .routes_reschedule import router as reschedule_router
from .routes_paths import router as paths_router

__all__ = [
    "monitoring_router",
    "reschedule_router",
    "paths_router",
]
