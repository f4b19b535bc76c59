"""
Commitment Urgency Service

Decides which open "I owe" commitments deserve attention right now.

Policy, in order:
- Expired work first (overdue, earliest due date first, at most 2)
- Near-term work next (due within 7 days, up to 4 items in total)
- Effort signals last (no due date but a high priority score, up to 5 in total)

Also flags "waiting for" items that have been open for more than two weeks.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from compass.engine_config import EngineConfig, get_engine_config
from compass.models.commitment import Commitment, CommitmentStatus, CommitmentUpdate
from compass.services.clock import Clock, require_aware, whole_days_between

logger = logging.getLogger(__name__)


class CommitmentUrgency(str, Enum):
    """Why a commitment made the list."""
    OVERDUE = "overdue"
    DUE_THIS_WEEK = "due_this_week"
    HIGH_PRIORITY = "high_priority"


@dataclass
class PrioritizedCommitment:
    """A commitment with the urgency tag it was selected under."""

    commitment: Commitment
    urgency: CommitmentUrgency
    days_overdue: int = 0


@dataclass
class CommitmentUrgencyReport:
    """All commitment views derived from one snapshot."""

    overdue: list[Commitment] = field(default_factory=list)
    due_this_week: list[Commitment] = field(default_factory=list)
    high_priority_no_date: list[Commitment] = field(default_factory=list)
    stale_waiting_for: list[Commitment] = field(default_factory=list)
    prioritized: list[PrioritizedCommitment] = field(default_factory=list)
    open_i_owe_count: int = 0
    open_waiting_for_count: int = 0

    @property
    def has_commitments_to_show(self) -> bool:
        return bool(self.overdue or self.due_this_week or self.high_priority_no_date)


class CommitmentUrgencyService:
    """Classifies and ranks commitments. Never mutates its input."""

    def __init__(self, clock: Clock, config: Optional[EngineConfig] = None):
        self.clock = clock
        self.config = config or get_engine_config()

    def _now(self, now: Optional[datetime]) -> datetime:
        return require_aware(now or self.clock.now())

    # === Partitions ===

    @staticmethod
    def open_i_owe(commitments: Iterable[Commitment]) -> list[Commitment]:
        return [c for c in commitments if c.is_open_i_owe]

    @staticmethod
    def open_waiting_for(commitments: Iterable[Commitment]) -> list[Commitment]:
        return [c for c in commitments if c.is_open_waiting_for]

    # === Urgency buckets ===

    def overdue(self, commitments: Iterable[Commitment], now: Optional[datetime] = None) -> list[Commitment]:
        """Open "I owe" items past their due date, earliest first."""
        now = self._now(now)
        items = [
            c for c in self.open_i_owe(commitments)
            if c.due_date is not None and c.due_date < now
        ]
        return sorted(items, key=lambda c: c.due_date)

    def due_this_week(self, commitments: Iterable[Commitment], now: Optional[datetime] = None) -> list[Commitment]:
        """Open "I owe" items due in (now, now + 7d], earliest first."""
        now = self._now(now)
        horizon = now + timedelta(days=self.config.commitment_due_window_days)
        items = [
            c for c in self.open_i_owe(commitments)
            if c.due_date is not None and now < c.due_date <= horizon
        ]
        return sorted(items, key=lambda c: c.due_date)

    def high_priority_no_date(self, commitments: Iterable[Commitment]) -> list[Commitment]:
        """Undated open "I owe" items above the score threshold, highest first."""
        threshold = self.config.high_priority_score_threshold
        items = [
            c for c in self.open_i_owe(commitments)
            if c.due_date is None and c.priority_score > threshold
        ]
        return sorted(items, key=lambda c: c.priority_score, reverse=True)

    def stale_waiting_for(self, commitments: Iterable[Commitment], now: Optional[datetime] = None) -> list[Commitment]:
        """Open "waiting for" items created more than 14 days ago, input order."""
        now = self._now(now)
        cutoff = now - timedelta(days=self.config.stale_waiting_for_days)
        return [c for c in self.open_waiting_for(commitments) if c.created_at < cutoff]

    # === Merge ===

    def prioritize(self, commitments: Iterable[Commitment], now: Optional[datetime] = None) -> list[PrioritizedCommitment]:
        """Merge the three buckets into the bounded attention list."""
        now = self._now(now)
        commitments = list(commitments)
        return self._merge(
            self.overdue(commitments, now),
            self.due_this_week(commitments, now),
            self.high_priority_no_date(commitments),
            now,
        )

    def _merge(
        self,
        overdue: list[Commitment],
        due_this_week: list[Commitment],
        high_priority: list[Commitment],
        now: datetime,
    ) -> list[PrioritizedCommitment]:
        cfg = self.config
        result = [
            PrioritizedCommitment(c, CommitmentUrgency.OVERDUE, whole_days_between(c.due_date, now))
            for c in overdue[:cfg.commitment_overdue_cap]
        ]

        room = max(0, cfg.commitment_near_term_cap - len(result))
        result.extend(
            PrioritizedCommitment(c, CommitmentUrgency.DUE_THIS_WEEK)
            for c in due_this_week[:room]
        )

        room = max(0, cfg.commitment_list_cap - len(result))
        result.extend(
            PrioritizedCommitment(c, CommitmentUrgency.HIGH_PRIORITY)
            for c in high_priority[:room]
        )
        return result

    def has_commitments_to_show(self, commitments: Iterable[Commitment], now: Optional[datetime] = None) -> bool:
        now = self._now(now)
        commitments = list(commitments)
        return bool(
            self.overdue(commitments, now)
            or self.due_this_week(commitments, now)
            or self.high_priority_no_date(commitments)
        )

    def classify(self, commitments: Iterable[Commitment], now: Optional[datetime] = None) -> CommitmentUrgencyReport:
        """Compute every commitment view for one snapshot at one instant."""
        now = self._now(now)
        commitments = list(commitments)

        overdue = self.overdue(commitments, now)
        due_this_week = self.due_this_week(commitments, now)
        high_priority = self.high_priority_no_date(commitments)

        report = CommitmentUrgencyReport(
            overdue=overdue,
            due_this_week=due_this_week,
            high_priority_no_date=high_priority,
            stale_waiting_for=self.stale_waiting_for(commitments, now),
            prioritized=self._merge(overdue, due_this_week, high_priority, now),
            open_i_owe_count=len(self.open_i_owe(commitments)),
            open_waiting_for_count=len(self.open_waiting_for(commitments)),
        )

        logger.debug(
            f"Classified {len(commitments)} commitments: {len(overdue)} overdue, "
            f"{len(due_this_week)} due this week, {len(high_priority)} high priority, "
            f"{len(report.stale_waiting_for)} stale waiting-for"
        )
        return report

    # === Actions ===

    def complete(self, commitment: Commitment, now: Optional[datetime] = None) -> CommitmentUpdate:
        """Instruction to mark a commitment done. The caller persists it."""
        now = self._now(now)
        logger.info(f"Completing commitment {commitment.id}")
        return CommitmentUpdate(
            commitment_id=commitment.id,
            status=CommitmentStatus.DONE,
            completed_at=now,
            updated_at=now,
        )

    def reopen(self, commitment: Commitment, now: Optional[datetime] = None) -> CommitmentUpdate:
        """Instruction to reopen a commitment and clear its completion time."""
        now = self._now(now)
        logger.info(f"Reopening commitment {commitment.id}")
        return CommitmentUpdate(
            commitment_id=commitment.id,
            status=CommitmentStatus.OPEN,
            completed_at=None,
            updated_at=now,
        )
