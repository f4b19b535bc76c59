"""Service for composing the dashboard and project prep briefings.

Pulls the individual engine services together into the views the client
renders. Like the services it wraps, it only reads snapshots.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from compass.engine_config import EngineConfig, get_engine_config
from compass.models.commitment import Commitment, CommitmentDirection
from compass.models.entry import Entry
from compass.models.project import Project
from compass.models.reflection import Reflection
from compass.services.clock import Clock, days_since, require_aware
from compass.services.commitment_urgency_service import (
    CommitmentUrgencyReport,
    CommitmentUrgencyService,
)
from compass.services.decision_review_service import (
    DecisionReviewReport,
    DecisionReviewService,
)
from compass.services.reflection_prompt_service import (
    ReflectionPrompt,
    ReflectionPromptService,
    latest,
)

logger = logging.getLogger(__name__)


@dataclass
class QuickStats:
    active_projects: int = 0
    open_i_owe: int = 0
    open_waiting_for: int = 0
    entries_this_week: int = 0


@dataclass
class Dashboard:
    """Everything the dashboard shows for one snapshot."""

    commitments: CommitmentUrgencyReport
    decisions: DecisionReviewReport
    reflection_prompt: ReflectionPrompt
    quick_stats: QuickStats
    attention_projects: list[Project] = field(default_factory=list)
    generated_at: Optional[datetime] = None


@dataclass
class ProjectPrep:
    """Briefing before a conversation about one project."""

    project: Project
    i_owe: list[Commitment] = field(default_factory=list)
    waiting_for: list[Commitment] = field(default_factory=list)
    overdue: list[Commitment] = field(default_factory=list)
    pending_decisions: list[Entry] = field(default_factory=list)
    recent_entries: list[Entry] = field(default_factory=list)
    days_since_reflection: Optional[int] = None
    needs_reflection: bool = False
    days_since_active: Optional[int] = None
    needs_attention: bool = False
    ai_context: dict = field(default_factory=dict)


def commitment_sort_key(commitment: Commitment):
    """Dated items by due date first, then undated by descending score."""
    if commitment.due_date is not None:
        return (0, commitment.due_date.timestamp(), 0.0)
    return (1, 0.0, -commitment.priority_score)


class BriefingService:
    """Composes engine views for the dashboard and project prep."""

    def __init__(self, clock: Clock, config: Optional[EngineConfig] = None):
        self.clock = clock
        self.config = config or get_engine_config()
        self.commitments = CommitmentUrgencyService(clock, self.config)
        self.decisions = DecisionReviewService(clock, self.config)
        self.prompts = ReflectionPromptService(clock, self.config)

    def _now(self, now: Optional[datetime]) -> datetime:
        return require_aware(now or self.clock.now())

    # === Dashboard ===

    def attention_projects(self, projects: Iterable[Project], now: Optional[datetime] = None) -> list[Project]:
        """Active, important projects that went quiet, in input order."""
        now = self._now(now)
        cfg = self.config
        matches = [
            p for p in projects
            if p.is_active and p.needs_attention(now, cfg.attention_min_priority, cfg.attention_inactive_days)
        ]
        return matches[:cfg.attention_projects_limit]

    def quick_stats(
        self,
        commitments: list[Commitment],
        entries: list[Entry],
        projects: list[Project],
        now: datetime,
    ) -> QuickStats:
        return QuickStats(
            active_projects=sum(1 for p in projects if p.is_active),
            open_i_owe=len(self.commitments.open_i_owe(commitments)),
            open_waiting_for=len(self.commitments.open_waiting_for(commitments)),
            entries_this_week=self.prompts.entries_this_week(entries, now),
        )

    def dashboard(
        self,
        commitments: Iterable[Commitment],
        entries: Iterable[Entry],
        reflections: Iterable[Reflection],
        projects: Iterable[Project],
        now: Optional[datetime] = None,
        quick_prompts_shown_today: Optional[int] = None,
    ) -> Dashboard:
        """Build the dashboard; every section is computed at the same instant."""
        now = self._now(now)
        commitments = list(commitments)
        entries = list(entries)
        reflections = list(reflections)
        projects = list(projects)

        result = Dashboard(
            commitments=self.commitments.classify(commitments, now),
            decisions=self.decisions.classify(entries, now),
            reflection_prompt=self.prompts.select(
                reflections,
                entries,
                projects,
                now=now,
                quick_prompts_shown_today=quick_prompts_shown_today,
            ),
            quick_stats=self.quick_stats(commitments, entries, projects, now),
            attention_projects=self.attention_projects(projects, now),
            generated_at=now,
        )

        logger.info(
            f"Dashboard built: {len(result.commitments.prioritized)} commitments, "
            f"{len(result.decisions.prioritized)} decisions, prompt {result.reflection_prompt.kind}"
        )
        return result

    # === Project prep ===

    def project_prep(
        self,
        project: Project,
        entries: Iterable[Entry],
        commitments: Iterable[Commitment],
        reflections: Iterable[Reflection],
        now: Optional[datetime] = None,
    ) -> ProjectPrep:
        """
        Gather what matters before talking about a project.

        Args:
            project: The project being discussed
            entries: Entry snapshot; only this project's live entries are used
            commitments: Commitment snapshot; only active ones for the project
            reflections: Reflection snapshot, for the reflection status

        Returns:
            ProjectPrep with the AI context payload filled in
        """
        now = self._now(now)
        cfg = self.config
        entries = list(entries)
        reflections = list(reflections)

        mine = [c for c in commitments if c.project_id == project.id and c.status.is_active]
        i_owe = sorted(
            (c for c in mine if c.direction == CommitmentDirection.I_OWE),
            key=commitment_sort_key,
        )
        waiting_for = sorted(
            (c for c in mine if c.direction == CommitmentDirection.WAITING_FOR),
            key=commitment_sort_key,
        )

        project_entries = [e for e in entries if e.project_id == project.id]
        cutoff = now - timedelta(days=cfg.prep_day_range_days)
        recent = sorted(
            (e for e in project_entries if not e.is_deleted and e.occurred_at > cutoff),
            key=lambda e: e.occurred_at,
            reverse=True,
        )[:cfg.prep_recent_entries_limit]

        last_reflection = latest(r for r in reflections if r.project_id == project.id)

        prep = ProjectPrep(
            project=project,
            i_owe=i_owe,
            waiting_for=waiting_for,
            overdue=[c for c in i_owe if c.is_overdue(now)],
            pending_decisions=self.decisions.pending_decisions(project_entries),
            recent_entries=recent,
            days_since_reflection=days_since(last_reflection.created_at if last_reflection else None, now),
            needs_reflection=self.prompts.project_needs_reflection(project, entries, reflections, now),
            days_since_active=project.days_since_last_active(now),
            needs_attention=project.needs_attention(now, cfg.attention_min_priority, cfg.attention_inactive_days),
        )
        prep.ai_context = self.ai_context(prep, now)

        logger.debug(
            f"Prep for project {project.id}: {len(i_owe)} i_owe, {len(waiting_for)} waiting_for, "
            f"{len(recent)} recent entries"
        )
        return prep

    @staticmethod
    def ai_context(prep: ProjectPrep, now: datetime) -> dict:
        """Statistics payload for the external briefing generator."""
        project = prep.project
        return {
            "generated_at": now.isoformat(),
            "project": {
                "id": project.id,
                "name": project.name,
                "status": project.status.value,
                "priority": project.priority,
                "days_since_active": prep.days_since_active,
            },
            "recent_entries": [
                {
                    "kind": e.kind.value,
                    "title": e.title,
                    "occurred_at": e.occurred_at.isoformat(),
                    "content": e.raw_content or "",
                }
                for e in prep.recent_entries
            ],
            "i_owe": [
                {
                    "title": c.title,
                    "counterparty": c.counterparty,
                    "due_date": c.due_date.isoformat() if c.due_date else None,
                    "overdue": c.is_overdue(now),
                }
                for c in prep.i_owe
            ],
            "waiting_for": [
                {
                    "title": c.title,
                    "counterparty": c.counterparty,
                    "due_date": c.due_date.isoformat() if c.due_date else None,
                }
                for c in prep.waiting_for
            ],
            "pending_decisions": [
                {
                    "title": d.title,
                    "confidence": d.decision_confidence,
                    "stakes": d.decision_stakes.value if d.decision_stakes else None,
                }
                for d in prep.pending_decisions
            ],
            "days_since_reflection": prep.days_since_reflection,
        }
