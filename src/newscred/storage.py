"""
Persistence collaborator: Redis when reachable, in-process memory otherwise.

``StorageManager`` is a thin async list store; the
``TrainingRepository`` on top of it keeps row-oriented tables for feedback,
training records and analysis history.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections import defaultdict
from collections.abc import Sequence
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .errors import StorageError
from .insights import newest_first, training_queue
from .models import AnalysisHistoryItem, HistoryPage, TrainingRecord, VerdictResult, dump_record, utcnow

try:
    import redis.asyncio as redis
    REDIS_AVAILABLE = True
except ImportError:
    REDIS_AVAILABLE = False

logger = logging.getLogger(__name__)

FEEDBACK_TABLE = "feedback"
TRAINING_TABLE = "feedback_training"
HISTORY_TABLE = "analysis_history"


class StorageManager:
    """Manages Redis or in-memory list storage with fallback at connect time.

    Once Redis is connected it is the only store: a failed Redis call raises
    ``StorageError`` instead of writing rows to process memory that later
    Redis reads would never return.
    """

    def __init__(self, redis_url: str | None = None):
        self.redis_url = redis_url
        self.redis_client: Optional["redis.Redis"] = None
        self.memory_lists: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.use_redis = False

    async def connect(self):
        """Attempt Redis connection, fallback to memory"""
        if not REDIS_AVAILABLE or not self.redis_url:
            logger.warning("Redis not configured, using in-memory storage")
            return

        try:
            self.redis_client = redis.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=5
            )
            await self.redis_client.ping()
            self.use_redis = True
            logger.info("Redis connected successfully")
        except Exception as e:
            logger.warning(f"Redis connection failed: {e}. Using in-memory storage")
            self.redis_client = None

    async def close(self):
        """Close Redis connection"""
        if self.redis_client:
            await self.redis_client.close()

    async def ping(self) -> bool:
        if not (self.use_redis and self.redis_client):
            return False
        try:
            return bool(await self.redis_client.ping())
        except Exception as e:
            logger.error(f"Redis ping error: {e}")
            return False

    def _redis_failure(self, operation: str, key: str, exc: Exception) -> StorageError:
        logger.error(f"Redis {operation} error on {key}: {exc}")
        return StorageError(f"Redis {operation} failed for {key}: {exc}")

    async def append(self, key: str, value: Dict[str, Any]):
        """Append a row to the list stored at key"""
        if self.use_redis and self.redis_client:
            payload = json.dumps(value)
            try:
                await self.redis_client.rpush(key, payload)
            except Exception as e:
                raise self._redis_failure("append", key, e) from e
            return

        self.memory_lists[key].append(value)

    async def list_values(self, key: str) -> List[Dict[str, Any]]:
        """All rows of the list stored at key, in insertion order"""
        if self.use_redis and self.redis_client:
            try:
                raw = await self.redis_client.lrange(key, 0, -1)
            except Exception as e:
                raise self._redis_failure("list", key, e) from e
            return [json.loads(item) for item in raw]

        return list(self.memory_lists.get(key, []))

    async def replace_at(self, key: str, index: int, value: Dict[str, Any]):
        """Overwrite one row of the list stored at key"""
        if self.use_redis and self.redis_client:
            payload = json.dumps(value)
            try:
                await self.redis_client.lset(key, index, payload)
            except Exception as e:
                raise self._redis_failure("replace", key, e) from e
            return

        rows = self.memory_lists.get(key, [])
        if not 0 <= index < len(rows):
            raise StorageError(f"No row {index} in {key}")
        rows[index] = value


class TrainingRepository:
    """Row-oriented tables for feedback, training records and analysis history."""

    def __init__(self, storage: StorageManager, *, namespace: str = "newscred") -> None:
        self._storage = storage
        self._namespace = namespace

    def _table(self, name: str) -> str:
        return f"{self._namespace}:table:{name}"

    async def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            await self._storage.append(self._table(table), row)
        except (TypeError, ValueError, KeyError) as exc:
            raise StorageError(f"Failed to insert into {table}: {exc}") from exc
        return row

    async def _rows(self, table: str) -> List[Dict[str, Any]]:
        return await self._storage.list_values(self._table(table))

    # Feedback -------------------------------------------------------
    async def insert_feedback(self, row: Dict[str, Any]) -> str:
        stored = {"id": uuid.uuid4().hex, "created_at": utcnow().isoformat(), **row}
        await self._insert(FEEDBACK_TABLE, stored)
        return stored["id"]

    async def get_feedback_for_user(self, user_id: str, limit: int = 100) -> List[Dict[str, Any]]:
        rows = [row for row in await self._rows(FEEDBACK_TABLE) if row.get("user_id") == user_id]
        rows.sort(key=lambda row: row.get("created_at") or "", reverse=True)
        return rows[:limit]

    # Training records -----------------------------------------------
    async def insert_training_record(self, record: TrainingRecord) -> TrainingRecord:
        await self._insert(TRAINING_TABLE, dump_record(record))
        return record

    async def _training_records(self) -> List[TrainingRecord]:
        records = []
        for row in await self._rows(TRAINING_TABLE):
            try:
                records.append(TrainingRecord.model_validate(row))
            except ValidationError as exc:
                logger.warning("Skip malformed training record %s: %s", row.get("id"), exc)
        return records

    async def get_recent_training_records(self, limit: int = 100) -> List[TrainingRecord]:
        return newest_first(await self._training_records())[:limit]

    async def get_training_queue(self) -> List[TrainingRecord]:
        return training_queue(await self._training_records())

    async def mark_processed(self, record_id: str) -> bool:
        key = self._table(TRAINING_TABLE)
        for index, row in enumerate(await self._rows(TRAINING_TABLE)):
            if row.get("id") == record_id:
                await self._storage.replace_at(key, index, {**row, "processed_for_training": True})
                return True
        return False

    # Analysis history -----------------------------------------------
    async def save_analysis(
        self,
        user_id: str,
        article_text: str,
        title: str | None,
        verdict: VerdictResult,
    ) -> AnalysisHistoryItem:
        item = AnalysisHistoryItem(
            id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            article_text=article_text,
            prediction=verdict.prediction,
            confidence_score=verdict.confidence,
            explanation=verdict.explanation,
            key_factors=verdict.key_factors,
        )
        await self._insert(HISTORY_TABLE, dump_record(item))
        return item

    async def list_analyses(
        self,
        user_id: str,
        *,
        page: int = 0,
        limit: int = 20,
        search: str | None = None,
    ) -> HistoryPage:
        items = [
            AnalysisHistoryItem.model_validate(row)
            for row in await self._rows(HISTORY_TABLE)
            if row.get("user_id") == user_id
        ]
        if search:
            needle = search.lower()
            items = [
                item
                for item in items
                if needle in (item.title or "").lower() or needle in item.article_text.lower()
            ]
        items = _sorted_newest(items)
        start = page * limit
        return HistoryPage(
            data=items[start:start + limit],
            total_count=len(items),
            has_more=len(items) > (page + 1) * limit,
        )


def _sorted_newest(items: Sequence[AnalysisHistoryItem]) -> List[AnalysisHistoryItem]:
    return sorted(items, key=lambda item: item.created_at, reverse=True)
