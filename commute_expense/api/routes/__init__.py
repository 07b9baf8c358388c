"""
API Routes Package

Contains all route modules for the expense API.
"""

from .session import router as session_router
from .drafts import router as drafts_router
from .submissions import router as submissions_router
from .approvals import router as approvals_router

__all__ = [
    "session_router",
    "drafts_router",
    "submissions_router",
    "approvals_router",
]
