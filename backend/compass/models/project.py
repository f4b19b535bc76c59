"""Projects own entries, commitments and reflections."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from compass.models.base import AwareDatetime, Snapshot
from compass.services.clock import days_since


class ProjectStatus(str, Enum):
    """Project lifecycle."""
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Project(Snapshot):
    """Read-only project snapshot."""

    id: str
    name: str
    status: ProjectStatus = ProjectStatus.ACTIVE
    priority: int = Field(3, ge=1, le=5)  # higher is more important
    last_active_at: Optional[AwareDatetime] = None
    created_at: Optional[AwareDatetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == ProjectStatus.ACTIVE

    def days_since_last_active(self, now: datetime) -> Optional[int]:
        return days_since(self.last_active_at or self.created_at, now)

    def needs_attention(self, now: datetime, min_priority: int = 3, inactive_days: int = 45) -> bool:
        """High enough priority and idle for too long."""
        days = self.days_since_last_active(now)
        if self.priority < min_priority or days is None:
            return False
        return days >= inactive_days
