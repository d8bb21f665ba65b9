"""
API routers mounted by app.main.create_app.
"""

from app.api.routers.summary_jobs import router as summary_jobs_router

__all__ = [
    "summary_jobs_router",
]
