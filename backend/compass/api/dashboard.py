"""API endpoint for the dashboard.

The client posts its current journal snapshot and gets back every
dashboard section: the commitments to act on, decisions to review, the
single reflection prompt, quick stats and projects that went quiet.
"""
import logging

from fastapi import APIRouter, Request

from compass.api.deps import EngineClock, EngineSettings
from compass.config import settings
from compass.rate_limiter import limiter
from compass.schemas.dashboard import DashboardRequest, DashboardResponse
from compass.services.briefing_service import BriefingService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=DashboardResponse)
@limiter.limit(settings.rate_limit)
async def build_dashboard(
    request: Request,
    snapshot: DashboardRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """Derive the dashboard from a snapshot. Nothing is stored."""
    service = BriefingService(clock, config)
    dashboard = service.dashboard(
        snapshot.commitments,
        snapshot.entries,
        snapshot.reflections,
        snapshot.projects,
        quick_prompts_shown_today=snapshot.quick_prompts_shown_today,
    )
    return DashboardResponse.from_dashboard(dashboard)
