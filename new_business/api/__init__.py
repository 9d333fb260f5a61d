"""
API layer for the tracker.
"""

from .routes import router
from .schemas import PolicyListResponse, DraftResponse, HealthResponse

__all__ = [
    "router",
    "PolicyListResponse",
    "DraftResponse",
    "HealthResponse",
]
