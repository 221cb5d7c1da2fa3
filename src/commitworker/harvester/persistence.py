"""
Persistence Writer and the MongoDB store it writes through.

Writes are insert-if-absent keyed by ``commit_id``: an existing record is never
touched, so re-running a harvest over the same commits is a no-op.
"""

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from .errors import StorageError
from .interfaces import StoreHandle
from .models import Commit, SaveResult

logger = logging.getLogger(__name__)

COMMIT_KEY = "commit_id"


class CommitWriter:
    """Saves commit batches through a StoreHandle."""

    def __init__(self, store: StoreHandle):
        self.store = store

    async def save(self, commits: Iterable[Commit]) -> SaveResult:
        """Insert each commit unless one with the same ``commit_id`` exists.

        The first failing write aborts the batch with StorageError; commits
        written before it stay written.
        """
        result = SaveResult()
        for commit in commits:
            try:
                inserted = await self.store.insert_if_absent(
                    COMMIT_KEY, commit.commit_id, commit.to_document()
                )
            except StorageError:
                raise
            except Exception as e:
                raise StorageError(f"failed to save commit {commit.commit_id}: {e}") from e

            if inserted:
                result.inserted += 1
            else:
                result.skipped += 1
        return result


class MongoCommitStore:
    """StoreHandle over a pymongo asyncio collection.

    Owns its client; build one at startup with ``connect`` and hand it down.
    """

    def __init__(self, collection: Any, client: Optional[Any] = None, timeout: float = 10.0):
        self.collection = collection
        self.client = client
        self.timeout = timeout

    @classmethod
    def connect(
        cls,
        uri: str,
        database: str = "dashboard",
        collection: str = "git_metrics",
        timeout: float = 10.0,
    ) -> "MongoCommitStore":
        client = AsyncMongoClient(
            uri,
            serverSelectionTimeoutMS=int(timeout * 1000),
            tz_aware=True,
        )
        return cls(client[database][collection], client=client, timeout=timeout)

    async def insert_if_absent(
        self, key_field: str, key: str, document: Mapping[str, Any]
    ) -> bool:
        try:
            result = await self.collection.update_one(
                {key_field: key},
                {"$setOnInsert": dict(document)},
                upsert=True,
            )
        except DuplicateKeyError:
            # Concurrent upsert inserted it first.
            return False
        except PyMongoError as e:
            raise StorageError(f"failed to update commit: {e}") from e
        return result.upserted_id is not None

    async def ping(self) -> None:
        """Connectivity check bounded by ``timeout`` seconds."""
        if self.client is None:
            return
        try:
            await asyncio.wait_for(self.client.admin.command("ping"), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StorageError(f"MongoDB ping timed out after {self.timeout}s") from e
        except PyMongoError as e:
            raise StorageError(f"failed to ping MongoDB: {e}") from e

    async def ensure_indexes(self) -> None:
        try:
            await self.collection.create_index(COMMIT_KEY, unique=True)
        except PyMongoError as e:
            raise StorageError(f"failed to create {COMMIT_KEY} index: {e}") from e

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None


__all__ = ["CommitWriter", "MongoCommitStore", "COMMIT_KEY"]
