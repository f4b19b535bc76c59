"""API endpoints supporting the reflection flow.

- Theme suggestions while the user is answering
- Whether to offer a quick reflection after saving an entry
- Fallback questions when the question generator is unavailable
"""
import logging
from typing import Optional

from fastapi import APIRouter, Query, Request

from compass.api.deps import EngineClock, EngineSettings
from compass.config import settings
from compass.models import ReflectionPeriodType, ReflectionType
from compass.rate_limiter import limiter
from compass.schemas.insights import (
    DefaultQuestionsResponse,
    QuickPromptRequest,
    QuickPromptResponse,
    SuggestedThemesRequest,
    SuggestedThemesResponse,
)
from compass.services.reflection_prompt_service import ReflectionPromptService, default_questions
from compass.services.reflection_rhythm_service import ReflectionRhythmService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/suggested-themes", response_model=SuggestedThemesResponse)
@limiter.limit(settings.rate_limit)
async def suggested_themes(
    request: Request,
    body: SuggestedThemesRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """Themes mentioned in the answers that are not tagged yet."""
    themes = ReflectionRhythmService(clock, config).suggested_themes(
        body.questions_answers,
        body.tags,
        limit=body.limit,
    )
    return SuggestedThemesResponse(themes=themes)


@router.post("/quick-prompt", response_model=QuickPromptResponse)
@limiter.limit(settings.rate_limit)
async def quick_prompt(
    request: Request,
    body: QuickPromptRequest,
    clock: EngineClock,
    config: EngineSettings,
):
    """Decide whether saving an entry should offer a quick reflection."""
    service = ReflectionPromptService(clock, config)
    count = body.quick_reflections_today
    if count is None:
        count = service.quick_reflections_today(body.reflections)

    if not service.should_prompt_quick_reflection(body.entry, count):
        return QuickPromptResponse(should_prompt=False)
    return QuickPromptResponse(
        should_prompt=True,
        questions=default_questions(ReflectionType.QUICK),
    )


@router.get("/default-questions", response_model=DefaultQuestionsResponse)
@limiter.limit(settings.rate_limit)
async def get_default_questions(
    request: Request,
    reflection_type: ReflectionType = Query(ReflectionType.PERIODIC),
    period_type: Optional[ReflectionPeriodType] = Query(None),
):
    """Fallback questions for a reflection type and period."""
    if reflection_type != ReflectionType.PERIODIC:
        period_type = None
    return DefaultQuestionsResponse(
        reflection_type=reflection_type,
        period_type=period_type,
        questions=default_questions(reflection_type, period_type),
    )
