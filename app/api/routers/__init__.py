"""
app/api/routers package marker.
"""

from app.api.routers.maintenance_router import router as maintenance_router
from app.api.routers.summary_router import router as summary_router
from app.api.routers.sync_router import router as sync_router

__all__ = [
    "maintenance_router",
    "summary_router",
    "sync_router",
]
