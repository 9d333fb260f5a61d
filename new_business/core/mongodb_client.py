"""
MongoDB client singleton for database operations.
Provides connection management and collection access.
"""

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from new_business.config import get_settings


_client = None


def get_mongodb_client() -> MongoClient:
    """
    Get MongoDB client singleton.
    Connecting is lazy; the first operation surfaces connection errors.
    """
    global _client
    if _client is None:
        settings = get_settings()
        # Short timeout to fail fast
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=2000)
    return _client


def get_database() -> Database:
    """Get the configured database."""
    client = get_mongodb_client()
    settings = get_settings()
    return client[settings.mongodb_database]


def get_collection(collection_name: str) -> Collection:
    """Get a specific collection from the database."""
    db = get_database()
    return db[collection_name]


def close_mongodb_client() -> None:
    """Close the MongoDB client connection."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


# Collection names as constants
class Collections:
    """MongoDB collection names."""
    POLICIES = "policies"
