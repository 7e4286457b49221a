import pytest

from newscred.engine import CredibilityEngine
from newscred.errors import InvalidInputError, StorageError
from newscred.scorer import CredibilityScorer
from newscred.service import CredibilityService, truncate_article
from newscred.storage import StorageManager, TrainingRepository

from helpers import NEUTRAL_ARTICLE


class FailingTrainingRepository(TrainingRepository):
    async def insert_training_record(self, record):
        raise StorageError("feedback_training table unavailable")


class FailingFeedbackRepository(TrainingRepository):
    async def insert_feedback(self, row):
        raise StorageError("feedback table unavailable")


def make_service(repository_cls=TrainingRepository, **kwargs):
    engine = CredibilityEngine(scorer=CredibilityScorer(random_source=lambda: 0.5))
    return CredibilityService(engine, repository_cls(StorageManager()), **kwargs)


@pytest.mark.asyncio
async def test_analyze_records_history():
    service = make_service()
    verdict = await service.analyze("reader", NEUTRAL_ARTICLE, "City report")
    assert verdict.prediction == "real"
    page = await service.history("reader")
    assert page.total_count == 1
    assert page.data[0].confidence_score == verdict.confidence


@pytest.mark.asyncio
async def test_analyze_rejects_blank_text():
    service = make_service()
    with pytest.raises(InvalidInputError):
        await service.analyze("reader", "   ")


@pytest.mark.asyncio
async def test_submit_feedback_stores_training_record():
    service = make_service()
    receipt = await service.submit_feedback("reader", NEUTRAL_ARTICLE, "real", 88.456, 5, "Accurate and well explained.")
    assert receipt.feedback_id
    assert receipt.training_record is not None
    assert receipt.training_record.feedback_id == receipt.feedback_id
    assert receipt.training_record.confidence_score == 88.46

    insights = await service.training_insights()
    assert insights.total_feedback == 1
    assert insights.accuracy_trends == pytest.approx(100.0)
    assert insights.high_confidence_accuracy == pytest.approx(100.0)

    stats = await service.feedback_stats("reader")
    assert stats.total_feedback == 1
    assert stats.avg_rating == pytest.approx(5.0)


@pytest.mark.asyncio
async def test_training_failure_does_not_fail_feedback(caplog):
    service = make_service(FailingTrainingRepository)
    receipt = await service.submit_feedback("reader", NEUTRAL_ARTICLE, "real", 70, 4)
    assert receipt.feedback_id
    assert receipt.training_record is None
    assert "training processing failed" in caplog.text
    assert (await service.feedback_stats("reader")).total_feedback == 1


@pytest.mark.asyncio
async def test_primary_feedback_failure_propagates():
    service = make_service(FailingFeedbackRepository)
    with pytest.raises(StorageError):
        await service.submit_feedback("reader", NEUTRAL_ARTICLE, "real", 70, 4)


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_submit_feedback_rejects_out_of_range_rating(rating):
    service = make_service()
    with pytest.raises(InvalidInputError):
        await service.submit_feedback("reader", NEUTRAL_ARTICLE, "real", 70, rating)
    assert (await service.feedback_stats("reader")).total_feedback == 0


@pytest.mark.asyncio
async def test_long_articles_are_truncated_before_storage():
    service = make_service(max_article_length=40)
    receipt = await service.submit_feedback("reader", NEUTRAL_ARTICLE, "real", 70, 4)
    assert receipt.training_record.article_text == NEUTRAL_ARTICLE[:40] + "..."


def test_truncate_article_keeps_short_text():
    assert truncate_article("short", 10) == "short"
    assert truncate_article("exactly10!", 10) == "exactly10!"
