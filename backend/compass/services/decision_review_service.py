"""
Decision Review Service

Surfaces decisions whose outcome still needs to be recorded:
- Overdue: review date has passed
- Due soon: review date within the next 7 days
- Stale: never scheduled for review and older than 30 days

The merged list keeps every overdue and due-soon decision ahead of stale
ones and is truncated only at the end, so review debt fills the list first.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from compass.engine_config import EngineConfig, get_engine_config
from compass.exceptions import EngineContractError
from compass.models.entry import DecisionOutcome, DecisionReviewUpdate, Entry
from compass.services.clock import Clock, require_aware, whole_days_between

logger = logging.getLogger(__name__)


class DecisionReviewReason(str, Enum):
    """Why a decision needs review."""
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    STALE = "stale"


@dataclass
class PrioritizedDecision:
    """A decision with its review reason and display label."""

    entry: Entry
    reason: DecisionReviewReason
    label: str
    days: Optional[int] = None


@dataclass
class DecisionReviewReport:
    """All decision-review views derived from one snapshot."""

    overdue: list[Entry] = field(default_factory=list)
    due_soon: list[Entry] = field(default_factory=list)
    stale: list[Entry] = field(default_factory=list)
    prioritized: list[PrioritizedDecision] = field(default_factory=list)
    pending_count: int = 0

    @property
    def has_decisions_to_show(self) -> bool:
        return bool(self.overdue or self.due_soon or self.stale)


def review_label(reason: DecisionReviewReason, days: Optional[int]) -> str:
    if reason == DecisionReviewReason.STALE:
        return "needs review"
    if not days:
        return "due today"
    if reason == DecisionReviewReason.OVERDUE:
        return f"{days}d overdue"
    return f"due in {days}d"


class DecisionReviewService:
    """Ranks decisions that need an outcome review."""

    def __init__(self, clock: Clock, config: Optional[EngineConfig] = None):
        self.clock = clock
        self.config = config or get_engine_config()

    def _now(self, now: Optional[datetime]) -> datetime:
        return require_aware(now or self.clock.now())

    @staticmethod
    def all_decisions(entries: Iterable[Entry]) -> list[Entry]:
        return [e for e in entries if e.is_decision_entry]

    def pending_decisions(self, entries: Iterable[Entry]) -> list[Entry]:
        """Decisions with no outcome yet (None or pending)."""
        return [e for e in self.all_decisions(entries) if e.is_pending_outcome]

    def overdue(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> list[Entry]:
        now = self._now(now)
        items = [
            e for e in self.pending_decisions(entries)
            if e.decision_review_date is not None and e.decision_review_date < now
        ]
        return sorted(items, key=lambda e: e.decision_review_date)

    def due_soon(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> list[Entry]:
        now = self._now(now)
        horizon = now + timedelta(days=self.config.decision_due_window_days)
        items = [
            e for e in self.pending_decisions(entries)
            if e.decision_review_date is not None and now < e.decision_review_date <= horizon
        ]
        return sorted(items, key=lambda e: e.decision_review_date)

    def stale(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> list[Entry]:
        """Unscheduled pending decisions older than 30 days, input order."""
        now = self._now(now)
        cutoff = now - timedelta(days=self.config.stale_decision_days)
        return [
            e for e in self.pending_decisions(entries)
            if e.decision_review_date is None and e.occurred_at < cutoff
        ]

    def prioritize(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> list[PrioritizedDecision]:
        now = self._now(now)
        entries = list(entries)
        return self._merge(
            self.overdue(entries, now),
            self.due_soon(entries, now),
            self.stale(entries, now),
            now,
        )

    def _merge(
        self,
        overdue: list[Entry],
        due_soon: list[Entry],
        stale: list[Entry],
        now: datetime,
    ) -> list[PrioritizedDecision]:
        merged: list[PrioritizedDecision] = []
        for entry in overdue:
            days = whole_days_between(entry.decision_review_date, now)
            merged.append(self._tag(entry, DecisionReviewReason.OVERDUE, days))
        for entry in due_soon:
            days = whole_days_between(now, entry.decision_review_date)
            merged.append(self._tag(entry, DecisionReviewReason.DUE_SOON, days))
        for entry in stale:
            merged.append(self._tag(entry, DecisionReviewReason.STALE, None))
        return merged[:self.config.decision_review_cap]

    @staticmethod
    def _tag(entry: Entry, reason: DecisionReviewReason, days: Optional[int]) -> PrioritizedDecision:
        return PrioritizedDecision(entry=entry, reason=reason, label=review_label(reason, days), days=days)

    def has_decisions_to_show(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> bool:
        now = self._now(now)
        entries = list(entries)
        return bool(self.overdue(entries, now) or self.due_soon(entries, now) or self.stale(entries, now))

    def classify(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> DecisionReviewReport:
        now = self._now(now)
        entries = list(entries)

        overdue = self.overdue(entries, now)
        due_soon = self.due_soon(entries, now)
        stale = self.stale(entries, now)

        report = DecisionReviewReport(
            overdue=overdue,
            due_soon=due_soon,
            stale=stale,
            prioritized=self._merge(overdue, due_soon, stale, now),
            pending_count=len(self.pending_decisions(entries)),
        )

        logger.debug(
            f"Decision reviews: {len(overdue)} overdue, {len(due_soon)} due soon, "
            f"{len(stale)} stale of {report.pending_count} pending"
        )
        return report

    # === Actions ===

    def review(self, entry: Entry, outcome: DecisionOutcome, now: Optional[datetime] = None) -> DecisionReviewUpdate:
        """
        Instruction to record a decision outcome.

        A re-review overwrites the previous outcome. Recording `pending`
        or reviewing an entry that is not a live decision is rejected.
        """
        now = self._now(now)

        if not entry.is_decision_entry:
            logger.warning(f"Refusing review of non-decision entry {entry.id}")
            raise EngineContractError(
                "Only live decision entries can be reviewed",
                details={"entry_id": entry.id, "is_decision": entry.is_decision, "is_deleted": entry.is_deleted},
            )
        if outcome == DecisionOutcome.PENDING:
            logger.warning(f"Refusing review of {entry.id} with pending outcome")
            raise EngineContractError(
                "A review must settle on a terminal outcome",
                details={"entry_id": entry.id, "outcome": outcome.value},
            )

        logger.info(f"Recording outcome {outcome.value} for decision {entry.id}")
        return DecisionReviewUpdate(
            entry_id=entry.id,
            decision_outcome=outcome,
            decision_outcome_date=now,
        )
