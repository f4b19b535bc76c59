"""
Reflection Prompt Service

Chooses the single reflection card shown on the dashboard. Guardrail: at
most one passive reflection prompt per day.

Evaluated in a fixed order, first match wins:
1. Already reflected today       -> recap of the latest reflection
2. Weekly reflection missing/old -> weekly prompt
3. Active project gone quiet     -> project check-in
4. Busy week, under daily cap    -> quick "busy week" prompt
5. Otherwise                     -> recap, or the empty state

Only step 4 consults the daily counter; the other steps are facts about the
snapshot, so re-rendering never produces a second prompt.
"""

import logging
from datetime import datetime, timedelta
from typing import Annotated, Callable, Iterable, Literal, Optional, Union

from pydantic import BaseModel, Field

from compass.engine_config import EngineConfig, get_engine_config
from compass.exceptions import require_non_negative
from compass.models.entry import Entry, EntryKind
from compass.models.project import Project
from compass.models.reflection import (
    Reflection,
    ReflectionPeriodType,
    ReflectionType,
)
from compass.services.clock import (
    Clock,
    days_since,
    is_in_iso_week,
    is_same_day,
    require_aware,
)

logger = logging.getLogger(__name__)


# === Prompt variants ===

class RecapPrompt(BaseModel):
    """Summary of the most recent reflection; no call to action."""
    kind: Literal["recap"] = "recap"
    reflection_id: str
    reflection_type: ReflectionType
    period_type: Optional[ReflectionPeriodType] = None
    created_at: datetime
    answered_count: int
    total_questions: int


class WeeklyPrompt(BaseModel):
    kind: Literal["weekly_prompt"] = "weekly_prompt"
    entries_this_week: int


class ProjectCheckInPrompt(BaseModel):
    kind: Literal["project_check_in"] = "project_check_in"
    project_id: str
    project_name: str


class BusyWeekPrompt(BaseModel):
    kind: Literal["busy_week"] = "busy_week"
    entries_this_week: int


class EmptyStatePrompt(BaseModel):
    """No reflections exist yet."""
    kind: Literal["empty_state"] = "empty_state"


ReflectionPrompt = Annotated[
    Union[RecapPrompt, WeeklyPrompt, ProjectCheckInPrompt, BusyWeekPrompt, EmptyStatePrompt],
    Field(discriminator="kind"),
]

ProjectPredicate = Callable[[Project], bool]


# Used when the AI question service is unavailable; reflecting is never blocked on it
DEFAULT_QUESTIONS: dict[tuple[ReflectionType, Optional[ReflectionPeriodType]], list[str]] = {
    (ReflectionType.QUICK, None): [
        "How confident are you in how this went?",
    ],
    (ReflectionType.PERIODIC, ReflectionPeriodType.WEEK): [
        "What was your biggest win this week?",
        "What commitment did you struggle to keep? Why?",
        "Which conversation or decision would you handle differently?",
        "What pattern do you notice in how you spent your time?",
        "What's one thing you want to do better next week?",
    ],
    (ReflectionType.PERIODIC, ReflectionPeriodType.MONTH): [
        "What progress did you make on your most important projects?",
        "Which relationships received the most attention? Which were neglected?",
        "What decisions are you most and least confident about?",
        "What feedback have you received and how have you acted on it?",
        "What's the most important lesson you learned this month?",
    ],
    (ReflectionType.PERIODIC, ReflectionPeriodType.QUARTER): [
        "Looking at your projects, what themes emerge in where you invested time?",
        "How has your leadership style evolved this quarter?",
        "What commitments did you consistently keep or break?",
        "What were the three most impactful decisions you made?",
        "What do you want to be different about next quarter?",
    ],
    (ReflectionType.PERIODIC, None): [
        "What's on your mind right now?",
        "What would you do differently if you could?",
    ],
    (ReflectionType.PROJECT, None): [
        "How am I showing up for this project?",
        "What's blocking progress that I haven't addressed?",
        "What conversation am I avoiding?",
        "What would success look like in the next 2 weeks?",
    ],
    (ReflectionType.RELATIONSHIP, None): [
        "How would this person rate my reliability?",
        "What have I promised that I haven't delivered?",
        "What's one thing I could do to strengthen this relationship?",
        "What difficult conversation am I avoiding with this person?",
    ],
}

QUICK_PROMPT_ENTRY_KINDS = {EntryKind.MEETING, EntryKind.DECISION}


def default_questions(
    reflection_type: ReflectionType,
    period_type: Optional[ReflectionPeriodType] = None,
) -> list[str]:
    """Fallback questions for a reflection type (period only matters for periodic)."""
    if reflection_type != ReflectionType.PERIODIC:
        period_type = None
    return list(DEFAULT_QUESTIONS[(reflection_type, period_type)])


def latest(reflections: Iterable[Reflection]) -> Optional[Reflection]:
    """Most recent reflection by creation time; first one wins a tie."""
    best: Optional[Reflection] = None
    for reflection in reflections:
        if best is None or reflection.created_at > best.created_at:
            best = reflection
    return best


class ReflectionPromptService:
    """Selects the one reflection prompt to show."""

    def __init__(self, clock: Clock, config: Optional[EngineConfig] = None):
        self.clock = clock
        self.config = config or get_engine_config()

    def _now(self, now: Optional[datetime]) -> datetime:
        return require_aware(now or self.clock.now())

    # === Signals ===

    def has_reflected_today(self, reflections: Iterable[Reflection], now: Optional[datetime] = None) -> bool:
        now = self._now(now)
        return any(is_same_day(r.created_at, now) for r in reflections)

    def quick_reflections_today(self, reflections: Iterable[Reflection], now: Optional[datetime] = None) -> int:
        now = self._now(now)
        return sum(
            1 for r in reflections
            if r.reflection_type == ReflectionType.QUICK and is_same_day(r.created_at, now)
        )

    def entries_this_week(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> int:
        """Live entries that occurred in the current ISO week (Mon-Sun)."""
        now = self._now(now)
        return sum(1 for e in entries if not e.is_deleted and is_in_iso_week(e.occurred_at, now))

    def should_prompt_weekly(self, reflections: Iterable[Reflection], now: Optional[datetime] = None) -> bool:
        now = self._now(now)
        last_weekly = latest(r for r in reflections if r.period_type == ReflectionPeriodType.WEEK)
        if last_weekly is None:
            return True
        return last_weekly.created_at < now - timedelta(days=self.config.weekly_reflection_max_age_days)

    def project_needs_reflection(
        self,
        project: Project,
        entries: Iterable[Entry],
        reflections: Iterable[Reflection],
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Active project with live entries and no reflection in over 14 days.

        A project that was never reflected on counts as 30 days without one.
        """
        now = self._now(now)
        if not project.is_active:
            return False

        has_activity = any(e.project_id == project.id and not e.is_deleted for e in entries)
        last = latest(r for r in reflections if r.project_id == project.id)
        days = days_since(last.created_at if last else None, now)
        if days is None:
            days = self.config.project_reflection_default_days
        return has_activity and days > self.config.project_reflection_gap_days

    def default_project_predicate(
        self,
        entries: Iterable[Entry],
        reflections: Iterable[Reflection],
        now: datetime,
    ) -> ProjectPredicate:
        entries = list(entries)
        reflections = list(reflections)
        return lambda project: self.project_needs_reflection(project, entries, reflections, now)

    def should_prompt_quick_reflection(self, entry: Entry, quick_reflections_today: int) -> bool:
        """Whether saving `entry` should offer a quick post-event reflection."""
        require_non_negative("quick_reflections_today", quick_reflections_today)
        if quick_reflections_today >= self.config.quick_reflection_daily_cap:
            return False
        if entry.kind not in QUICK_PROMPT_ENTRY_KINDS and not entry.is_decision:
            return False
        content_length = len(entry.raw_content or "") + len(entry.title)
        return content_length > self.config.quick_prompt_min_content_length

    # === Selection ===

    def select(
        self,
        reflections: Iterable[Reflection],
        entries: Iterable[Entry],
        projects: Iterable[Project],
        now: Optional[datetime] = None,
        needs_reflection: Optional[ProjectPredicate] = None,
        quick_prompts_shown_today: Optional[int] = None,
    ) -> ReflectionPrompt:
        """
        Pick exactly one prompt variant.

        Args:
            reflections: Reflection snapshot (any order)
            entries: Entry snapshot, used for the weekly activity count
            projects: Projects in display order; the first active match wins
            needs_reflection: Overrides the project check-in predicate
            quick_prompts_shown_today: Overrides the daily quick-prompt counter

        Returns:
            One of RecapPrompt, WeeklyPrompt, ProjectCheckInPrompt,
            BusyWeekPrompt, EmptyStatePrompt
        """
        now = self._now(now)
        reflections = list(reflections)
        entries = list(entries)

        if quick_prompts_shown_today is not None:
            require_non_negative("quick_prompts_shown_today", quick_prompts_shown_today)

        if self.has_reflected_today(reflections, now):
            return self._recap_or_empty(reflections)

        week_count = self.entries_this_week(entries, now)

        if self.should_prompt_weekly(reflections, now):
            logger.debug(f"Weekly reflection due ({week_count} entries this week)")
            return WeeklyPrompt(entries_this_week=week_count)

        predicate = needs_reflection or self.default_project_predicate(entries, reflections, now)
        for project in projects:
            if project.is_active and predicate(project):
                logger.debug(f"Project {project.id} needs a check-in")
                return ProjectCheckInPrompt(project_id=project.id, project_name=project.name)

        shown_today = (
            quick_prompts_shown_today
            if quick_prompts_shown_today is not None
            else self.quick_reflections_today(reflections, now)
        )
        if (
            week_count >= self.config.busy_week_entry_threshold
            and shown_today < self.config.quick_reflection_daily_cap
        ):
            return BusyWeekPrompt(entries_this_week=week_count)

        return self._recap_or_empty(reflections)

    @staticmethod
    def _recap_or_empty(reflections: list[Reflection]):
        last = latest(reflections)
        if last is None:
            return EmptyStatePrompt()
        return RecapPrompt(
            reflection_id=last.id,
            reflection_type=last.reflection_type,
            period_type=last.period_type,
            created_at=last.created_at,
            answered_count=last.answered_count,
            total_questions=last.total_questions,
        )
