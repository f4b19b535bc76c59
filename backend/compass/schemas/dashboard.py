from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from compass.models import Commitment, Entry, Project, Reflection
from compass.services.briefing_service import Dashboard, ProjectPrep
from compass.services.commitment_urgency_service import CommitmentUrgency
from compass.services.decision_review_service import DecisionReviewReason
from compass.services.reflection_prompt_service import ReflectionPrompt


class DashboardRequest(BaseModel):
    """Journal snapshot the dashboard is derived from."""
    commitments: list[Commitment] = []
    entries: list[Entry] = []
    reflections: list[Reflection] = []
    projects: list[Project] = []  # display order
    quick_prompts_shown_today: Optional[int] = None


class PrioritizedCommitmentResponse(BaseModel):
    commitment: Commitment
    urgency: CommitmentUrgency
    days_overdue: int = 0


class DecisionReviewItemResponse(BaseModel):
    entry: Entry
    reason: DecisionReviewReason
    label: str
    days: Optional[int] = None


class QuickStatsResponse(BaseModel):
    active_projects: int
    open_i_owe: int
    open_waiting_for: int
    entries_this_week: int


class DashboardResponse(BaseModel):
    """Dashboard sections, each already ordered and capped."""
    commitments: list[PrioritizedCommitmentResponse]
    has_commitments_to_show: bool
    stale_waiting_for: list[Commitment]
    decision_reviews: list[DecisionReviewItemResponse]
    has_decisions_to_show: bool
    pending_decision_count: int
    reflection_prompt: ReflectionPrompt
    quick_stats: QuickStatsResponse
    attention_projects: list[Project]
    generated_at: datetime

    @classmethod
    def from_dashboard(cls, dashboard: Dashboard) -> "DashboardResponse":
        stats = dashboard.quick_stats
        return cls(
            commitments=[
                PrioritizedCommitmentResponse(
                    commitment=item.commitment,
                    urgency=item.urgency,
                    days_overdue=item.days_overdue,
                )
                for item in dashboard.commitments.prioritized
            ],
            has_commitments_to_show=dashboard.commitments.has_commitments_to_show,
            stale_waiting_for=dashboard.commitments.stale_waiting_for,
            decision_reviews=[
                DecisionReviewItemResponse(
                    entry=item.entry,
                    reason=item.reason,
                    label=item.label,
                    days=item.days,
                )
                for item in dashboard.decisions.prioritized
            ],
            has_decisions_to_show=dashboard.decisions.has_decisions_to_show,
            pending_decision_count=dashboard.decisions.pending_count,
            reflection_prompt=dashboard.reflection_prompt,
            quick_stats=QuickStatsResponse(
                active_projects=stats.active_projects,
                open_i_owe=stats.open_i_owe,
                open_waiting_for=stats.open_waiting_for,
                entries_this_week=stats.entries_this_week,
            ),
            attention_projects=dashboard.attention_projects,
            generated_at=dashboard.generated_at,
        )


class ProjectPrepRequest(BaseModel):
    """Snapshot for a project prep briefing."""
    project: Project
    entries: list[Entry] = []
    commitments: list[Commitment] = []
    reflections: list[Reflection] = []


class ProjectPrepResponse(BaseModel):
    project: Project
    i_owe: list[Commitment]
    waiting_for: list[Commitment]
    overdue: list[Commitment]
    pending_decisions: list[Entry]
    recent_entries: list[Entry]
    days_since_reflection: Optional[int] = None
    needs_reflection: bool
    days_since_active: Optional[int] = None
    needs_attention: bool
    ai_context: dict

    @classmethod
    def from_prep(cls, prep: ProjectPrep) -> "ProjectPrepResponse":
        return cls(
            project=prep.project,
            i_owe=prep.i_owe,
            waiting_for=prep.waiting_for,
            overdue=prep.overdue,
            pending_decisions=prep.pending_decisions,
            recent_entries=prep.recent_entries,
            days_since_reflection=prep.days_since_reflection,
            needs_reflection=prep.needs_reflection,
            days_since_active=prep.days_since_active,
            needs_attention=prep.needs_attention,
            ai_context=prep.ai_context,
        )
