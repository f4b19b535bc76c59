from compass.models.base import AwareDatetime, Snapshot
from compass.models.commitment import (
    Commitment,
    CommitmentDirection,
    CommitmentStatus,
    CommitmentUpdate,
)
from compass.models.entry import (
    Entry,
    EntryKind,
    DecisionStakes,
    DecisionOutcome,
    DecisionReviewUpdate,
    REVIEWED_OUTCOMES,
)
from compass.models.reflection import (
    Reflection,
    ReflectionQA,
    ReflectionType,
    ReflectionPeriodType,
    ReflectionMood,
    MOOD_SCALE,
)
from compass.models.project import Project, ProjectStatus

__all__ = [
    "AwareDatetime",
    "Snapshot",
    "Commitment",
    "CommitmentDirection",
    "CommitmentStatus",
    "CommitmentUpdate",
    "Entry",
    "EntryKind",
    "DecisionStakes",
    "DecisionOutcome",
    "DecisionReviewUpdate",
    "REVIEWED_OUTCOMES",
    "Reflection",
    "ReflectionQA",
    "ReflectionType",
    "ReflectionPeriodType",
    "ReflectionMood",
    "MOOD_SCALE",
    "Project",
    "ProjectStatus",
]
