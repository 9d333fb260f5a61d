"""
Policy repositories.

The whole collection is read and written at once (single user, last writer
wins). Two backends:

- JsonFileRepository: one JSON document on disk, the default.
- MongoPolicyRepository: one MongoDB document per policy, ordered by an
  ``order`` field so collection order survives a round trip, and written as
  a new generation so a failed save never empties the store.

Backup snapshots are pretty-printed UTF-8 JSON arrays in the same camelCase
shape the browser application exported.
"""

import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import pydantic
from pydantic import BaseModel, Field, TypeAdapter
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from new_business.config import get_settings
from new_business.errors import PersistenceError, ValidationError
from new_business.tracker.models import Policy


logger = logging.getLogger(__name__)

_policy_list = TypeAdapter(List[Policy])

BACKUP_FILENAME_FORMAT = "new_business_tracker_backup_{date}.json"


class ImportPreview(BaseModel):
    """Result of checking a backup file before it replaces the collection."""
    is_valid: bool
    message: Optional[str] = Field(default=None)
    policy_count: Optional[int] = Field(default=None)


def backup_filename(today: date) -> str:
    return BACKUP_FILENAME_FORMAT.format(date=today.isoformat())


def dump_policies(policies: List[Policy]) -> List[Dict[str, Any]]:
    return [p.model_dump(mode="json", by_alias=True, exclude_none=True) for p in policies]


def serialize_snapshot(policies: List[Policy]) -> bytes:
    return json.dumps(dump_policies(policies), indent=2, ensure_ascii=False).encode("utf-8")


def _load_payload(data: bytes) -> List[Any]:
    """JSON array check shared by preview and import."""
    try:
        payload = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError("The file is corrupted or not in the correct JSON format.") from e

    if not isinstance(payload, list):
        raise ValidationError(
            "The file is not a valid backup. It does not contain a list of policies."
        )

    if payload:
        first = payload[0]
        if not isinstance(first, dict) or not first.get("id") or not first.get("clientName"):
            raise ValidationError("The data in the file does not appear to be valid policy data.")
    return payload


def parse_snapshot(data: bytes) -> List[Policy]:
    """
    Parse a backup file.

    Raises:
        ValidationError: not JSON, not an array, or not policy-shaped
    """
    payload = _load_payload(data)
    try:
        return _policy_list.validate_python(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(
            f"The backup contains invalid policy data ({e.error_count()} problem(s))."
        ) from e


def preview_snapshot(data: bytes) -> ImportPreview:
    try:
        payload = _load_payload(data)
    except ValidationError as e:
        return ImportPreview(is_valid=False, message=str(e))
    return ImportPreview(is_valid=True, policy_count=len(payload))


class PolicyRepository(ABC):
    """Whole-collection policy storage."""

    @abstractmethod
    def load_all(self) -> List[Policy]:
        ...

    @abstractmethod
    def save_all(self, policies: List[Policy]) -> None:
        ...

    @abstractmethod
    def describe(self) -> str:
        """Human readable location, for logs and health checks."""

    def append(self, policy: Policy) -> None:
        self.save_all(self.load_all() + [policy])

    def remove(self, policy_id: str) -> bool:
        """Delete a policy permanently; False if it was not stored."""
        policies = self.load_all()
        remaining = [p for p in policies if p.id != policy_id]
        if len(remaining) == len(policies):
            return False
        self.save_all(remaining)
        return True

    def export_snapshot(self) -> bytes:
        return serialize_snapshot(self.load_all())

    def import_snapshot(self, data: bytes) -> List[Policy]:
        """Replace the entire collection with a backup; nothing changes on error."""
        policies = parse_snapshot(data)
        self.save_all(policies)
        logger.info(f"Imported {len(policies)} policies into {self.describe()}")
        return policies


class JsonFileRepository(PolicyRepository):
    """Collection stored as a single JSON array on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def describe(self) -> str:
        return f"file:{self.path}"

    def load_all(self) -> List[Policy]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_bytes()
            return _policy_list.validate_json(raw) if raw.strip() else []
        except OSError as e:
            raise PersistenceError(f"Could not read policies from {self.path}: {e}") from e
        except pydantic.ValidationError as e:
            raise PersistenceError(f"Stored policies in {self.path} are unreadable") from e

    def save_all(self, policies: List[Policy]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(serialize_snapshot(policies))
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Could not save policies to {self.path}: {e}") from e
        logger.debug(f"Saved {len(policies)} policies to {self.path}")


class MongoPolicyRepository(PolicyRepository):
    """
    Collection stored as one document per policy.

    Every save writes a complete new generation of documents and then points
    the marker document at it, so a failed save leaves the previous
    generation in place. Stale generations are removed afterwards.
    """

    MARKER_ID = "__current_generation__"

    def __init__(self, collection: Collection):
        self.collection = collection

    def describe(self) -> str:
        return f"mongodb:{self.collection.name}"

    def load_all(self) -> List[Policy]:
        try:
            marker = self.collection.find_one({"_id": self.MARKER_ID})
            if marker is None:
                query = {"_id": {"$ne": self.MARKER_ID}}
            else:
                query = {"generation": marker["current"]}
            docs = list(self.collection.find(query, {"_id": 0}).sort("order", 1))
        except PyMongoError as e:
            raise PersistenceError(f"Could not read policies from MongoDB: {e}") from e

        for doc in docs:
            doc.pop("order", None)
            doc.pop("generation", None)
        try:
            return _policy_list.validate_python(docs)
        except pydantic.ValidationError as e:
            raise PersistenceError("Stored policies in MongoDB are unreadable") from e

    def save_all(self, policies: List[Policy]) -> None:
        generation = uuid.uuid4().hex
        docs = dump_policies(policies)
        for order, doc in enumerate(docs):
            doc["order"] = order
            doc["generation"] = generation

        try:
            if docs:
                self.collection.insert_many(docs)
            self.collection.update_one(
                {"_id": self.MARKER_ID},
                {"$set": {"current": generation}},
                upsert=True,
            )
        except PyMongoError as e:
            self._discard_generation(generation)
            raise PersistenceError(f"Could not save policies to MongoDB: {e}") from e

        try:
            self.collection.delete_many({
                "_id": {"$ne": self.MARKER_ID},
                "generation": {"$ne": generation},
            })
        except PyMongoError as e:
            # Stale generations are never read; the next save removes them
            logger.warning(f"Could not remove old policy documents: {e}")
        logger.debug(f"Saved {len(policies)} policies to MongoDB (generation {generation})")

    def _discard_generation(self, generation: str) -> None:
        """Remove documents of a save that did not become current."""
        try:
            marker = self.collection.find_one({"_id": self.MARKER_ID})
            if marker is not None and marker.get("current") == generation:
                return
            self.collection.delete_many({"generation": generation})
        except PyMongoError as e:
            logger.warning(f"Could not clean up partial save {generation}: {e}")


@lru_cache()
def get_policy_repository() -> PolicyRepository:
    """Repository for the configured storage backend."""
    settings = get_settings()
    if settings.storage_backend == "mongodb":
        from new_business.core.mongodb_client import get_collection, Collections

        return MongoPolicyRepository(get_collection(Collections.POLICIES))
    return JsonFileRepository(settings.policies_file)
