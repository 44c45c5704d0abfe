"""
app/api/routers package marker.
"""

from app.api.routers.incident_import import router as incident_import_router

__all__ = [
    "incident_import_router",
]
