"""API endpoints for commitment actions.

The engine does not persist anything: each action returns the update the
client should apply to its store.
"""
import logging

from fastapi import APIRouter, Request

from compass.api.deps import EngineClock, EngineSettings
from compass.config import settings
from compass.models import CommitmentUpdate
from compass.rate_limiter import limiter
from compass.schemas.actions import CommitmentActionRequest
from compass.services.commitment_urgency_service import CommitmentUrgencyService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/complete", response_model=CommitmentUpdate)
@limiter.limit(settings.rate_limit)
async def complete_commitment(
    request: Request,
    body: CommitmentActionRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """Mark a commitment done."""
    return CommitmentUrgencyService(clock, config).complete(body.commitment)


@router.post("/reopen", response_model=CommitmentUpdate)
@limiter.limit(settings.rate_limit)
async def reopen_commitment(
    request: Request,
    body: CommitmentActionRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """Reopen a commitment and clear its completion time."""
    return CommitmentUrgencyService(clock, config).reopen(body.commitment)
