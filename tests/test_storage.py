"""
Unit tests for storage manager and training repository
"""

import json

import pytest

from newscred.engine import CredibilityEngine
from newscred.errors import StorageError
from newscred.scorer import CredibilityScorer
from newscred.service import CredibilityService
from newscred.storage import TRAINING_TABLE, StorageManager, TrainingRepository

from helpers import NEUTRAL_ARTICLE


class FlakyRedis:
    """Redis client double whose writes fail while reads keep working"""

    def __init__(self, rows=None):
        self.rows = {key: [json.dumps(row) for row in values] for key, values in (rows or {}).items()}

    async def ping(self):
        return True

    async def lrange(self, key, start, end):
        return list(self.rows.get(key, []))

    async def rpush(self, key, value):
        raise ConnectionError("Connection reset by peer")

    async def lset(self, key, index, value):
        raise ConnectionError("Connection reset by peer")


def redis_backed_storage(rows=None):
    storage = StorageManager("redis://localhost:6379")
    storage.redis_client = FlakyRedis(rows)
    storage.use_redis = True
    return storage


@pytest.fixture
def repository():
    return TrainingRepository(StorageManager())


@pytest.mark.asyncio
async def test_memory_storage():
    """Test in-memory storage"""
    storage = StorageManager()
    await storage.connect()
    assert storage.use_redis is False

    await storage.append("rows", {"id": 1})
    await storage.append("rows", {"id": 2})
    await storage.replace_at("rows", 0, {"id": 1, "done": True})

    assert await storage.list_values("rows") == [{"id": 1, "done": True}, {"id": 2}]
    assert await storage.list_values("missing") == []
    assert await storage.ping() is False


@pytest.mark.asyncio
async def test_memory_replace_of_missing_row_raises():
    storage = StorageManager()
    with pytest.raises(StorageError):
        await storage.replace_at("rows", 0, {"id": 1})


@pytest.mark.asyncio
async def test_redis_storage():
    """Test Redis storage (if available)"""
    try:
        import redis.asyncio  # noqa: F401
    except ImportError:
        pytest.skip("Redis module not installed")

    storage = StorageManager("redis://localhost:6379")
    await storage.connect()

    if not storage.use_redis:
        pytest.skip("Redis not available")

    key = "newscred_test_rows"
    await storage.redis_client.delete(key)
    await storage.append(key, {"value": "test"})
    await storage.replace_at(key, 0, {"value": "updated"})
    assert await storage.list_values(key) == [{"value": "updated"}]

    await storage.redis_client.delete(key)
    await storage.close()


@pytest.mark.asyncio
async def test_redis_write_failure_is_not_hidden_in_memory():
    storage = redis_backed_storage()
    with pytest.raises(StorageError):
        await storage.append("rows", {"id": 1})
    assert storage.memory_lists == {}


@pytest.mark.asyncio
async def test_failed_primary_feedback_write_raises():
    storage = redis_backed_storage()
    engine = CredibilityEngine(scorer=CredibilityScorer(random_source=lambda: 0.5))
    service = CredibilityService(engine, TrainingRepository(storage))

    with pytest.raises(StorageError):
        await service.submit_feedback("reader", NEUTRAL_ARTICLE, "real", 70, 4)
    assert await service.repository.get_feedback_for_user("reader") == []


@pytest.mark.asyncio
async def test_mark_processed_raises_storage_error_when_redis_update_fails():
    table = f"newscred:table:{TRAINING_TABLE}"
    storage = redis_backed_storage({table: [{"id": "r1", "processed_for_training": False}]})

    with pytest.raises(StorageError):
        await TrainingRepository(storage).mark_processed("r1")


@pytest.mark.asyncio
async def test_training_records_round_trip_and_processing(repository):
    engine = CredibilityEngine()
    first = engine.submit_feedback(NEUTRAL_ARTICLE, "real", 60, 3, user_id="u1", feedback_id="f1")
    second = engine.submit_feedback(NEUTRAL_ARTICLE, "fake", 10, 3, user_id="u1", feedback_id="f2")
    await repository.insert_training_record(first)
    await repository.insert_training_record(second)

    recent = await repository.get_recent_training_records(10)
    assert {record.id for record in recent} == {first.id, second.id}

    queue = await repository.get_training_queue()
    assert [record.id for record in queue] == [first.id, second.id]

    assert await repository.mark_processed(first.id) is True
    assert await repository.mark_processed("missing") is False
    queue = await repository.get_training_queue()
    assert [record.id for record in queue] == [second.id]


@pytest.mark.asyncio
async def test_feedback_rows_are_scoped_to_user(repository):
    await repository.insert_feedback({"user_id": "a", "user_rating": 5, "confidence_score": 90})
    await repository.insert_feedback({"user_id": "b", "user_rating": 1, "confidence_score": 50})
    rows = await repository.get_feedback_for_user("a")
    assert len(rows) == 1
    assert rows[0]["user_rating"] == 5
    assert rows[0]["id"]


@pytest.mark.asyncio
async def test_analysis_history_pagination_and_search(repository):
    engine = CredibilityEngine()
    for index in range(5):
        title = "Budget vote" if index % 2 == 0 else "Weather update"
        verdict = engine.analyze(NEUTRAL_ARTICLE, title)
        await repository.save_analysis("reader", NEUTRAL_ARTICLE, title, verdict)
    await repository.save_analysis("someone-else", NEUTRAL_ARTICLE, "Budget vote", engine.analyze(NEUTRAL_ARTICLE))

    first_page = await repository.list_analyses("reader", page=0, limit=2)
    assert first_page.total_count == 5
    assert len(first_page.data) == 2
    assert first_page.has_more is True

    last_page = await repository.list_analyses("reader", page=2, limit=2)
    assert len(last_page.data) == 1
    assert last_page.has_more is False

    budget = await repository.list_analyses("reader", search="budget")
    assert budget.total_count == 3
    assert all(item.title == "Budget vote" for item in budget.data)
