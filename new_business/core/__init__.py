"""
Core services for the tracker: storage backends and the drafting client.
"""

from .mongodb_client import get_mongodb_client, get_database, get_collection
from .storage import (
    PolicyRepository,
    JsonFileRepository,
    MongoPolicyRepository,
    get_policy_repository,
)
from .vertex_client import VertexDraftClient, get_draft_client

__all__ = [
    "get_mongodb_client",
    "get_database",
    "get_collection",
    "PolicyRepository",
    "JsonFileRepository",
    "MongoPolicyRepository",
    "get_policy_repository",
    "VertexDraftClient",
    "get_draft_client",
]
