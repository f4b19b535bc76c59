"""API endpoint for recording decision outcomes."""
import logging

from fastapi import APIRouter, Request

from compass.api.deps import EngineClock, EngineSettings
from compass.config import settings
from compass.models import DecisionReviewUpdate
from compass.rate_limiter import limiter
from compass.schemas.actions import DecisionReviewRequest
from compass.services.decision_review_service import DecisionReviewService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/review", response_model=DecisionReviewUpdate)
@limiter.limit(settings.rate_limit)
async def review_decision(
    request: Request,
    body: DecisionReviewRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """
    Record how a decision turned out.

    Reviewing an already-reviewed decision overwrites its outcome. A
    `pending` outcome or a non-decision entry is rejected with 422.
    """
    return DecisionReviewService(clock, config).review(body.entry, body.outcome)
