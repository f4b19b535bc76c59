from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from compass.models import (
    Commitment,
    DecisionOutcome,
    DecisionStakes,
    Entry,
    Reflection,
    ReflectionMood,
    ReflectionPeriodType,
    ReflectionQA,
    ReflectionType,
)
from compass.services.decision_calibration_service import (
    CalibrationInsight,
    DecisionCalibrationReport,
)
from compass.services.reflection_rhythm_service import (
    ReflectionRhythmReport,
    RhythmState,
    TimeRange,
)


# === Decisions ===

class DecisionInsightsRequest(BaseModel):
    entries: list[Entry] = []


class DecisionInsightsResponse(BaseModel):
    """Calibration statistics. Rates are integer percentages."""
    total_decisions: int
    reviewed_count: int
    pending_review_count: int
    validation_rate: int
    outcome_distribution: dict[DecisionOutcome, int]
    # Levels without reviewed decisions are absent, not 0
    confidence_calibration: dict[int, int]
    decisions_by_confidence: dict[int, int]
    calibration_insight: Optional[CalibrationInsight] = None
    calibration_message: Optional[str] = None
    stakes_validation_rates: dict[DecisionStakes, int]
    decisions_by_stakes: dict[DecisionStakes, int]
    decisions_this_quarter: int
    recent_decisions: list[Entry]
    generated_at: datetime

    @classmethod
    def from_report(cls, report: DecisionCalibrationReport, now: datetime) -> "DecisionInsightsResponse":
        return cls(
            total_decisions=report.total_decisions,
            reviewed_count=report.reviewed_count,
            pending_review_count=report.pending_review_count,
            validation_rate=report.validation_rate,
            outcome_distribution=report.outcome_distribution,
            confidence_calibration=report.confidence_calibration,
            decisions_by_confidence=report.decisions_by_confidence,
            calibration_insight=report.calibration_insight,
            calibration_message=report.calibration_message,
            stakes_validation_rates=report.stakes_validation_rates,
            decisions_by_stakes=report.decisions_by_stakes,
            decisions_this_quarter=report.decisions_this_quarter,
            recent_decisions=report.recent_decisions,
            generated_at=now,
        )


# === Reflections ===

class ReflectionInsightsRequest(BaseModel):
    reflections: list[Reflection] = []
    commitments: list[Commitment] = []


class ThemeCountResponse(BaseModel):
    theme: str
    count: int


class MoodCountResponse(BaseModel):
    mood: ReflectionMood
    count: int


class RhythmStatusResponse(BaseModel):
    state: RhythmState
    streak: int = 0


class ReflectionInsightsResponse(BaseModel):
    """Reflection habit statistics for one time range."""
    time_range: TimeRange
    total_reflections: int
    completed_reflections: int
    quick_reflections: int
    weekly_streak: int
    best_streak: int
    rhythm_status: RhythmStatusResponse
    weekly_average: float
    weekly_trend_percent: int
    top_themes: list[ThemeCountResponse]
    mood_distribution: list[MoodCountResponse]
    commitments_generated: int
    commitments_completed: int
    commitment_completion_rate: int

    @classmethod
    def from_report(cls, report: ReflectionRhythmReport) -> "ReflectionInsightsResponse":
        return cls(
            time_range=report.time_range,
            total_reflections=report.total_reflections,
            completed_reflections=report.completed_reflections,
            quick_reflections=report.quick_reflections,
            weekly_streak=report.weekly_streak,
            best_streak=report.best_streak,
            rhythm_status=RhythmStatusResponse(
                state=report.rhythm_status.state,
                streak=report.rhythm_status.streak,
            ),
            weekly_average=round(report.weekly_average, 1),
            weekly_trend_percent=report.weekly_trend_percent,
            top_themes=[ThemeCountResponse(theme=t.theme, count=t.count) for t in report.top_themes],
            mood_distribution=[MoodCountResponse(mood=m.mood, count=m.count) for m in report.mood_distribution],
            commitments_generated=report.commitments_generated,
            commitments_completed=report.commitments_completed,
            commitment_completion_rate=report.commitment_completion_rate,
        )


class SuggestedThemesRequest(BaseModel):
    """Answers typed so far and the tags already on the reflection."""
    questions_answers: list[ReflectionQA] = []
    tags: list[str] = []
    limit: Optional[int] = Field(None, description="Defaults to the configured limit (4)")


class SuggestedThemesResponse(BaseModel):
    themes: list[str]


class QuickPromptRequest(BaseModel):
    """Entry that was just saved, plus today's quick-reflection count."""
    entry: Entry
    reflections: list[Reflection] = []
    quick_reflections_today: Optional[int] = None  # counted from reflections when omitted


class QuickPromptResponse(BaseModel):
    should_prompt: bool
    questions: list[str] = []


class DefaultQuestionsResponse(BaseModel):
    reflection_type: ReflectionType
    period_type: Optional[ReflectionPeriodType] = None
    questions: list[str]
