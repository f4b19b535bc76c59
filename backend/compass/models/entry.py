"""Journal entries and the decision fields they may carry.

A decision entry records a hypothesis (rationale, assumptions, confidence,
stakes, review date) and, after review, an outcome.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from compass.models.base import AwareDatetime, Snapshot


class EntryKind(str, Enum):
    """Kind of journal entry."""
    MEETING = "meeting"
    UPDATE = "update"
    DECISION = "decision"
    NOTE = "note"
    PREP = "prep"
    REFLECTION = "reflection"


class DecisionStakes(str, Enum):
    """Subjective impact of a decision, independent of confidence."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DecisionOutcome(str, Enum):
    """Outcome of a decision after review."""
    PENDING = "pending"
    VALIDATED = "validated"
    INVALIDATED = "invalidated"
    MIXED = "mixed"
    SUPERSEDED = "superseded"


# Outcomes a review can settle on
REVIEWED_OUTCOMES = (
    DecisionOutcome.VALIDATED,
    DecisionOutcome.INVALIDATED,
    DecisionOutcome.MIXED,
    DecisionOutcome.SUPERSEDED,
)


class Entry(Snapshot):
    """Read-only entry snapshot."""

    id: str
    title: str = ""
    kind: EntryKind = EntryKind.NOTE
    occurred_at: AwareDatetime
    created_at: Optional[AwareDatetime] = None
    raw_content: Optional[str] = None
    is_decision: bool = False
    is_deleted: bool = False
    project_id: Optional[str] = None

    # Hypothesis
    decision_rationale: Optional[str] = None
    decision_assumptions: Optional[str] = None
    decision_confidence: Optional[int] = Field(None, ge=1, le=5)
    decision_stakes: Optional[DecisionStakes] = None
    decision_review_date: Optional[AwareDatetime] = None

    # Outcome
    decision_outcome: Optional[DecisionOutcome] = None
    decision_outcome_date: Optional[AwareDatetime] = None

    @property
    def is_decision_entry(self) -> bool:
        return self.is_decision and not self.is_deleted

    @property
    def is_pending_outcome(self) -> bool:
        return self.decision_outcome is None or self.decision_outcome == DecisionOutcome.PENDING

    @property
    def has_been_reviewed(self) -> bool:
        return not self.is_pending_outcome

    def needs_decision_review(self, now: datetime) -> bool:
        """Review date reached and still no outcome."""
        if not self.is_decision_entry or self.decision_review_date is None:
            return False
        return self.is_pending_outcome and self.decision_review_date <= now


class DecisionReviewUpdate(Snapshot):
    """Instruction for the store: record a decision's outcome."""

    entry_id: str
    decision_outcome: DecisionOutcome
    decision_outcome_date: AwareDatetime
