"""API endpoint for project prep briefings."""
import logging

from fastapi import APIRouter, HTTPException, Request, status

from compass.api.deps import EngineClock, EngineSettings
from compass.config import settings
from compass.rate_limiter import limiter
from compass.schemas.dashboard import ProjectPrepRequest, ProjectPrepResponse
from compass.services.briefing_service import BriefingService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{project_id}/prep", response_model=ProjectPrepResponse)
@limiter.limit(settings.rate_limit)
async def project_prep(
    request: Request,
    project_id: str,
    snapshot: ProjectPrepRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """
    Prep briefing before a conversation about a project.

    Returns open commitments in priority order, pending decisions, the most
    recent entries and the payload handed to the briefing generator.
    """
    if snapshot.project.id != project_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Body project {snapshot.project.id} does not match path project {project_id}",
        )

    prep = BriefingService(clock, config).project_prep(
        snapshot.project,
        snapshot.entries,
        snapshot.commitments,
        snapshot.reflections,
    )
    return ProjectPrepResponse.from_prep(prep)
