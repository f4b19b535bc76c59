"""Reflections - quick post-event notes, periodic reviews, project and
relationship check-ins."""
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator

from compass.models.base import AwareDatetime, Snapshot


class ReflectionType(str, Enum):
    """Scope of a reflection."""
    QUICK = "quick"                # Post-event micro-reflection
    PERIODIC = "periodic"          # Weekly/monthly/quarterly review
    PROJECT = "project"
    RELATIONSHIP = "relationship"


class ReflectionPeriodType(str, Enum):
    """Period covered by a periodic reflection."""
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


class ReflectionMood(str, Enum):
    """Mood captured while reflecting."""
    CONFIDENT = "confident"
    UNCERTAIN = "uncertain"
    ENERGIZED = "energized"
    DRAINED = "drained"
    NEUTRAL = "neutral"


# Lowest to highest energy
MOOD_SCALE = (
    ReflectionMood.DRAINED,
    ReflectionMood.UNCERTAIN,
    ReflectionMood.NEUTRAL,
    ReflectionMood.CONFIDENT,
    ReflectionMood.ENERGIZED,
)


class ReflectionQA(Snapshot):
    """One question and its (possibly empty) answer."""

    question: str
    answer: str = ""
    linked_entry_id: Optional[str] = None

    @property
    def is_answered(self) -> bool:
        return bool(self.answer)


def normalize_tag(tag: str) -> str:
    return tag.strip().lower()


class Reflection(Snapshot):
    """Read-only reflection snapshot."""

    id: str
    reflection_type: ReflectionType = ReflectionType.PERIODIC
    period_type: Optional[ReflectionPeriodType] = None
    created_at: AwareDatetime
    mood: Optional[ReflectionMood] = None
    tags: list[str] = Field(default_factory=list)
    questions_answers: list[ReflectionQA] = Field(default_factory=list)
    linked_entry_ids: list[str] = Field(default_factory=list)
    generated_commitment_ids: list[str] = Field(default_factory=list)
    source_entry_id: Optional[str] = None
    project_id: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        """Lower-case, trim and de-duplicate tags, keeping first occurrence."""
        seen: list[str] = []
        for tag in v:
            normalized = normalize_tag(tag)
            if normalized and normalized not in seen:
                seen.append(normalized)
        return seen

    @model_validator(mode="after")
    def check_quick_shape(self) -> "Reflection":
        if self.reflection_type == ReflectionType.QUICK and len(self.questions_answers) != 1:
            raise ValueError(
                "a quick reflection has exactly one question/answer pair, "
                f"got {len(self.questions_answers)}"
            )
        return self

    @property
    def is_complete(self) -> bool:
        qa = self.questions_answers
        return bool(qa) and all(item.is_answered for item in qa)

    @property
    def answered_count(self) -> int:
        return sum(1 for item in self.questions_answers if item.is_answered)

    @property
    def total_questions(self) -> int:
        return len(self.questions_answers)

    @property
    def progress(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return self.answered_count / self.total_questions
