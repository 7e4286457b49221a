"""
NewsCred Credibility Service
Heuristic news-article credibility analysis with feedback-driven training data
"""

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any, List
from collections import defaultdict
import logging
import time
import os
from datetime import datetime, timezone
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables early so Settings picks them up
load_dotenv()

from newscred.config import get_settings  # noqa: E402
from newscred.engine import CredibilityEngine  # noqa: E402
from newscred.errors import InvalidInputError, StorageError  # noqa: E402
from newscred.models import FeedbackStats, HistoryPage, Insights, TrainingRecord, VerdictResult  # noqa: E402
from newscred.service import CredibilityService  # noqa: E402
from newscred.storage import StorageManager, TrainingRepository  # noqa: E402
from data_loader import load_datasets  # noqa: E402


# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('logs/newscred.log') if os.path.exists('logs') else logging.NullHandler()
    ]
)

logger = logging.getLogger(__name__)

settings = get_settings()


def log_configuration():
    """Log current configuration"""
    logger.info("Configuration loaded:")
    logger.info(f"  Redis URL: {settings.redis_url}")
    logger.info(f"  Data dir: {settings.data_dir}")
    logger.info(f"  History limit: {settings.history_limit}")
    logger.info(
        f"  Rate limit: {settings.rate_limit_requests} requests / {settings.rate_limit_window_minutes} min"
    )


# Metrics tracker
class Metrics:
    """Track service metrics"""

    def __init__(self):
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.total_processing_time = 0.0
        self.verdicts = defaultdict(int)
        self.feedback_events = 0
        self.start_time = time.time()

    def record_request(self, success: bool, processing_time: float, prediction: Optional[str] = None):
        """Record request outcome"""
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        self.total_processing_time += processing_time
        if prediction:
            self.verdicts[prediction] += 1

    def get_stats(self) -> Dict[str, Any]:
        """Get current metrics"""
        uptime = time.time() - self.start_time
        avg_time = self.total_processing_time / self.total_requests if self.total_requests > 0 else 0

        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "success_rate": f"{(self.successful_requests / self.total_requests * 100):.1f}%" if self.total_requests > 0 else "N/A",
            "average_processing_time": f"{avg_time:.4f}s",
            "verdicts": dict(self.verdicts),
            "feedback_events": self.feedback_events,
            "uptime_seconds": int(uptime)
        }


metrics = Metrics()


class RateLimiter:
    """Sliding-window rate limit per user"""

    def __init__(self, max_requests: int = 100, window_seconds: int = 3600):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.requests = defaultdict(list)  # user id -> list of timestamps

    def _recent(self, key: str, now: float) -> List[float]:
        window_start = now - self.window_seconds
        return [req_time for req_time in self.requests[key] if req_time > window_start]

    def is_allowed(self, key: str) -> tuple[bool, Optional[str]]:
        """Check if request is allowed"""
        now = time.time()
        self.requests[key] = self._recent(key, now)

        if len(self.requests[key]) >= self.max_requests:
            wait_time = self.window_seconds - (now - self.requests[key][0])
            return False, f"Rate limit exceeded. Try again in {int(wait_time)}s"

        self.requests[key].append(now)
        return True, None

    def get_remaining(self, key: str) -> int:
        """Get remaining requests for a user"""
        return max(0, self.max_requests - len(self._recent(key, time.time())))


rate_limiter = RateLimiter(
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_minutes * 60,
)

storage = StorageManager(settings.redis_url)
repository = TrainingRepository(storage)
engine = CredibilityEngine(history_limit=settings.history_limit)
service = CredibilityService(
    engine,
    repository,
    history_limit=settings.history_limit,
    max_article_length=settings.max_article_length,
)


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.title} v{settings.version}")
    logger.info("=" * 60)

    log_configuration()
    datasets = load_datasets(settings.data_dir)
    lexicons = datasets["_lexicons"]
    engine.analysis_lexicon = lexicons["analysis"]
    engine.training_lexicon = lexicons["training"]
    app.state.datasets = datasets
    await storage.connect()

    logger.info("Service ready")

    yield

    logger.info("Shutting down...")
    await storage.close()
    logger.info("Shutdown complete")


# FastAPI application
app = FastAPI(
    title=settings.title,
    version=settings.version,
    description="Heuristic credibility analysis for news articles",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid input", "detail": str(exc)}
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage unavailable for {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Storage unavailable", "detail": "Please try again later."}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.debug else "An error occurred"
        }
    )


def current_user(x_user_id: Optional[str] = Header(None)) -> str:
    """Resolve the signed-in user from the auth layer's header"""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to continue."
        )
    return x_user_id.strip()


# Request/Response models
class AnalyzeRequest(BaseModel):
    """Analysis request model"""

    text: str = Field(..., max_length=settings.max_text_length, description="Article text to analyze")
    title: Optional[str] = Field(None, max_length=500, description="Article headline if available")

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError('Please enter some text to analyze.')
        return v


class FeedbackRequest(BaseModel):
    """Feedback on a verdict"""

    article_text: str = Field(..., min_length=1)
    model_prediction: str = Field(..., description="Prediction shown to the user: real or fake")
    confidence_score: float = Field(..., ge=0, le=100)
    user_rating: int = Field(..., ge=1, le=5)
    user_feedback: Optional[str] = Field(None, max_length=2000)


class FeedbackResponse(BaseModel):
    feedback_id: str
    training_processed: bool
    training_weight: Optional[float] = None
    training_record_id: Optional[str] = None
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


# API endpoints
@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "service": settings.title,
        "version": settings.version,
        "status": "operational",
        "endpoints": {
            "analyze": "POST /analyze",
            "feedback": "POST /feedback",
            "feedback_stats": "GET /feedback/stats",
            "history": "GET /history",
            "training_insights": "GET /training/insights",
            "training_queue": "GET /training/queue",
            "health": "GET /health",
            "metrics": "GET /metrics"
        },
        "storage": "redis" if storage.use_redis else "memory"
    }


@app.get("/health")
async def health_check():
    """Detailed health check"""
    storage_healthy = await storage.ping()

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "api": "healthy",
            "storage": "redis" if storage_healthy else "memory",
            "engine": "built-in"
        },
        "metrics": metrics.get_stats()
    }


@app.get("/metrics")
async def get_metrics():
    """Get service metrics"""
    return {
        "service": settings.title,
        "version": settings.version,
        "metrics": metrics.get_stats(),
        "storage": {
            "type": "redis" if storage.use_redis else "memory",
            "memory_tables": len(storage.memory_lists)
        }
    }


@app.post("/analyze", response_model=VerdictResult)
async def analyze_article(request_body: AnalyzeRequest, user_id: str = Depends(current_user)):
    """Analyze an article and return a credibility verdict"""

    allowed, error_msg = rate_limiter.is_allowed(user_id)
    if not allowed:
        logger.warning(f"Rate limit exceeded for {user_id}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=error_msg
        )

    start_time = time.time()
    try:
        verdict = await service.analyze(user_id, request_body.text, request_body.title)
    except InvalidInputError:
        metrics.record_request(False, time.time() - start_time)
        raise

    metrics.record_request(True, time.time() - start_time, verdict.prediction)
    logger.info(
        f"Analysis for {user_id}: {verdict.prediction} ({verdict.confidence}%), "
        f"remaining requests: {rate_limiter.get_remaining(user_id)}"
    )
    return verdict


@app.post("/feedback", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(request_body: FeedbackRequest, user_id: str = Depends(current_user)):
    """Record a rating of a verdict and derive its training record"""
    try:
        receipt = await service.submit_feedback(
            user_id,
            request_body.article_text,
            request_body.model_prediction,
            request_body.confidence_score,
            request_body.user_rating,
            request_body.user_feedback,
        )
    except StorageError as e:
        logger.error(f"Feedback submission failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="There was an error submitting your feedback. Please try again."
        )

    metrics.feedback_events += 1
    record = receipt.training_record
    return FeedbackResponse(
        feedback_id=receipt.feedback_id,
        training_processed=record is not None,
        training_weight=record.training_weight if record else None,
        training_record_id=record.id if record else None,
    )


@app.get("/feedback/stats", response_model=FeedbackStats)
async def get_feedback_stats(user_id: str = Depends(current_user)):
    """Aggregate rating statistics for the current user"""
    return await service.feedback_stats(user_id)


@app.get("/history", response_model=HistoryPage)
async def get_history(
    user_id: str = Depends(current_user),
    page: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=200),
):
    """Paginated analysis history for the current user"""
    return await service.history(user_id, page=page, limit=limit, search=search)


@app.get("/training/insights", response_model=Insights)
async def get_training_insights(user_id: str = Depends(current_user)):
    """Aggregate insights over the most recent training records"""
    return await service.training_insights()


@app.get("/training/queue", response_model=List[TrainingRecord])
async def get_training_queue(user_id: str = Depends(current_user)):
    """Unprocessed training records, heaviest first"""
    return await service.training_queue()


@app.post("/training/{record_id}/processed")
async def mark_training_processed(record_id: str, user_id: str = Depends(current_user)):
    """Mark a training record as consumed by offline training"""
    if not await service.mark_processed(record_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Training record not found"
        )
    logger.info(f"[{record_id}] Marked as processed by {user_id}")
    return {"message": "Training record marked as processed"}
