"""API endpoints for longitudinal insights (decisions and reflections)."""
import logging

from fastapi import APIRouter, Query, Request

from compass.api.deps import EngineClock, EngineSettings
from compass.config import settings
from compass.rate_limiter import limiter
from compass.schemas.insights import (
    DecisionInsightsRequest,
    DecisionInsightsResponse,
    ReflectionInsightsRequest,
    ReflectionInsightsResponse,
)
from compass.services.decision_calibration_service import DecisionCalibrationService
from compass.services.reflection_rhythm_service import ReflectionRhythmService, TimeRange

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/decisions", response_model=DecisionInsightsResponse)
@limiter.limit(settings.rate_limit)
async def decision_insights(
    request: Request,
    snapshot: DecisionInsightsRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """
    Decision calibration statistics.

    Compares stated confidence against recorded outcomes. Confidence levels
    with no reviewed decisions are left out of `confidence_calibration`.
    """
    now = clock.now()
    report = DecisionCalibrationService(clock, config).analyze(snapshot.entries, now)
    return DecisionInsightsResponse.from_report(report, now)


@router.post("/reflections", response_model=ReflectionInsightsResponse)
@limiter.limit(settings.rate_limit)
async def reflection_insights(
    request: Request,
    snapshot: ReflectionInsightsRequest,
    clock: EngineClock,
    config: EngineSettings,
    time_range: TimeRange = Query(TimeRange.MONTH),
):
    """Reflection streaks, rhythm, themes and mood over a time range."""
    report = ReflectionRhythmService(clock, config).analyze(
        snapshot.reflections,
        snapshot.commitments,
        time_range=time_range,
    )
    return ReflectionInsightsResponse.from_report(report)
