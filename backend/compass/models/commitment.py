"""Commitments - who owes whom what.

Two directions share one table:
- "I owe": the user promised an action to someone else
- "Waiting for": someone else owes the user an action
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from compass.models.base import AwareDatetime, Snapshot
from compass.services.clock import whole_days_between


class CommitmentDirection(str, Enum):
    """Who owes the action."""
    I_OWE = "i_owe"
    WAITING_FOR = "waiting_for"


class CommitmentStatus(str, Enum):
    """Lifecycle of a commitment."""
    OPEN = "open"
    DONE = "done"
    BLOCKED = "blocked"
    DROPPED = "dropped"

    @property
    def is_active(self) -> bool:
        return self in (CommitmentStatus.OPEN, CommitmentStatus.BLOCKED)


class Commitment(Snapshot):
    """Read-only commitment snapshot."""

    id: str
    title: str = ""
    direction: CommitmentDirection = CommitmentDirection.I_OWE
    status: CommitmentStatus = CommitmentStatus.OPEN
    due_date: Optional[AwareDatetime] = None
    created_at: AwareDatetime
    # Only meaningful when due_date is absent
    priority_score: float = 0.0
    counterparty: Optional[str] = None
    project_id: Optional[str] = None
    source_entry_id: Optional[str] = None
    completed_at: Optional[AwareDatetime] = None

    @property
    def is_open_i_owe(self) -> bool:
        return self.direction == CommitmentDirection.I_OWE and self.status == CommitmentStatus.OPEN

    @property
    def is_open_waiting_for(self) -> bool:
        return self.direction == CommitmentDirection.WAITING_FOR and self.status == CommitmentStatus.OPEN

    def is_overdue(self, now: datetime) -> bool:
        if self.due_date is None or not self.status.is_active:
            return False
        return self.due_date < now

    def days_until_due(self, now: datetime) -> Optional[int]:
        """Whole days until the due date (negative once overdue)."""
        if self.due_date is None:
            return None
        if self.due_date >= now:
            return whole_days_between(now, self.due_date)
        return -whole_days_between(self.due_date, now)


class CommitmentUpdate(Snapshot):
    """Instruction for the store: apply these fields to a commitment."""

    commitment_id: str
    status: CommitmentStatus
    completed_at: Optional[AwareDatetime] = None
    updated_at: AwareDatetime
