"""
Reflection Rhythm Service

Tracks how consistently the user keeps a weekly reflection habit and what
they keep reflecting about.

Weeks are ISO weeks (Monday to Sunday) in the timezone of `now`.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from compass.engine_config import EngineConfig, get_engine_config
from compass.exceptions import require_positive
from compass.models.commitment import Commitment, CommitmentStatus
from compass.models.reflection import (
    MOOD_SCALE,
    Reflection,
    ReflectionMood,
    ReflectionQA,
    ReflectionType,
    normalize_tag,
)
from compass.services.clock import (
    Clock,
    is_in_iso_week,
    local,
    require_aware,
    start_of_iso_week,
)
from compass.services.decision_calibration_service import rate_percent

logger = logging.getLogger(__name__)


class TimeRange(str, Enum):
    """Insight window sizes."""
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    ALL_TIME = "all_time"

    @property
    def days(self) -> Optional[int]:
        return {
            TimeRange.MONTH: 30,
            TimeRange.QUARTER: 90,
            TimeRange.YEAR: 365,
            TimeRange.ALL_TIME: None,
        }[self]


class RhythmState(str, Enum):
    STREAK = "streak"
    ON_TRACK = "on_track"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"


class MoodTrend(str, Enum):
    MORE_POSITIVE = "more_positive"
    LOWER_ENERGY = "lower_energy"
    CONSISTENT = "consistent"


# Ordered: evaluation order decides which suggestions survive truncation
THEME_KEYWORDS: list[tuple[str, list[str]]] = [
    ("delegation", ["delegat", "hand off", "handoff", "empower", "ownership"]),
    ("feedback", ["feedback", "critique", "praise"]),
    ("conflict", ["conflict", "disagree", "tension", "pushback", "argument"]),
    ("communication", ["communicat", "clarity", "unclear", "messaging", "listen"]),
    ("prioritization", ["priorit", "focus", "trade-off", "tradeoff", "overcommit"]),
    ("time management", ["calendar", "time management", "too many meetings", "deadline", "overwhelm"]),
    ("decision making", ["decision", "decide", "judgment", "judgement"]),
    ("coaching", ["coach", "mentor", "1:1", "one-on-one", "career growth"]),
    ("hiring", ["hire", "hiring", "interview", "recruit", "onboard"]),
    ("strategy", ["strategy", "strategic", "vision", "roadmap", "long-term"]),
    ("stakeholders", ["stakeholder", "alignment", "executive", "buy-in"]),
    ("energy", ["tired", "burnout", "burned out", "exhausted", "stress"]),
    ("accountability", ["accountab", "follow through", "follow-through", "promised", "dropped the ball"]),
]


@dataclass
class RhythmStatus:
    """Weekly habit label; `streak` is set for the STREAK state."""

    state: RhythmState
    streak: int = 0


@dataclass
class ThemeCount:
    theme: str
    count: int


@dataclass
class MoodCount:
    mood: ReflectionMood
    count: int


@dataclass
class ReflectionRhythmReport:
    """Reflection habit statistics for the insights screen."""

    time_range: TimeRange
    total_reflections: int = 0
    completed_reflections: int = 0
    quick_reflections: int = 0
    weekly_streak: int = 0
    best_streak: int = 0
    rhythm_status: RhythmStatus = field(default_factory=lambda: RhythmStatus(RhythmState.DUE_TODAY))
    weekly_average: float = 0.0
    weekly_trend_percent: int = 0
    top_themes: list[ThemeCount] = field(default_factory=list)
    mood_distribution: list[MoodCount] = field(default_factory=list)
    commitments_generated: int = 0
    commitments_completed: int = 0
    commitment_completion_rate: int = 0


class ReflectionRhythmService:
    """Streaks, rhythm, themes and mood over a reflection snapshot."""

    def __init__(self, clock: Clock, config: Optional[EngineConfig] = None):
        self.clock = clock
        self.config = config or get_engine_config()

    def _now(self, now: Optional[datetime]) -> datetime:
        return require_aware(now or self.clock.now())

    # === Weeks ===

    @staticmethod
    def _has_reflection_in_week(reflections: list[Reflection], now: datetime, weeks_back: int) -> bool:
        return any(is_in_iso_week(r.created_at, now, weeks_back) for r in reflections)

    def weekly_streak(self, reflections: Iterable[Reflection], now: Optional[datetime] = None) -> int:
        """Consecutive ISO weeks with a reflection, counting back from this week."""
        now = self._now(now)
        weeks = self._reflection_weeks(reflections, now)
        streak = 0
        week = start_of_iso_week(now)
        while week in weeks:
            streak += 1
            week = start_of_iso_week(week - timedelta(days=1))
        return streak

    def best_streak(self, reflections: Iterable[Reflection], now: Optional[datetime] = None) -> int:
        """Longest run of consecutive ISO weeks with a reflection."""
        now = self._now(now)
        weeks = sorted(self._reflection_weeks(reflections, now))
        best = run = 0
        previous: Optional[datetime] = None
        for week in weeks:
            if previous is not None and start_of_iso_week(week - timedelta(days=1)) == previous:
                run += 1
            else:
                run = 1
            best = max(best, run)
            previous = week
        return best

    @staticmethod
    def _reflection_weeks(reflections: Iterable[Reflection], now: datetime) -> set[datetime]:
        return {start_of_iso_week(local(r.created_at, now)) for r in reflections}

    def rhythm_status(self, reflections: Iterable[Reflection], now: Optional[datetime] = None) -> RhythmStatus:
        """
        Label the weekly habit.

        Reflected this week: streak (when longer than one week) or on track.
        Otherwise due today from Friday on, overdue from Wednesday when last
        week was also missed, and due today during the early-week grace period.
        """
        now = self._now(now)
        reflections = list(reflections)

        if self._has_reflection_in_week(reflections, now, 0):
            streak = self.weekly_streak(reflections, now)
            if streak > 1:
                return RhythmStatus(RhythmState.STREAK, streak)
            return RhythmStatus(RhythmState.ON_TRACK, streak)

        weekday = now.weekday()  # Monday == 0
        if weekday >= 4:
            return RhythmStatus(RhythmState.DUE_TODAY)
        if not self._has_reflection_in_week(reflections, now, 1) and weekday >= 2:
            return RhythmStatus(RhythmState.OVERDUE)
        return RhythmStatus(RhythmState.DUE_TODAY)

    # === Frequency ===

    def filter_by_range(
        self,
        reflections: Iterable[Reflection],
        time_range: TimeRange,
        now: Optional[datetime] = None,
    ) -> list[Reflection]:
        now = self._now(now)
        if time_range.days is None:
            return list(reflections)
        cutoff = now - timedelta(days=time_range.days)
        return [r for r in reflections if r.created_at >= cutoff]

    def weekly_average(self, reflections: Iterable[Reflection], time_range: TimeRange, now: Optional[datetime] = None) -> float:
        """Reflections per week over the range; all time is treated as a year."""
        filtered = self.filter_by_range(reflections, time_range, now)
        if not filtered:
            return 0.0
        weeks = max(1.0, (time_range.days or 365) / 7.0)
        return len(filtered) / weeks

    def weekly_trend_percent(self, reflections: Iterable[Reflection], now: Optional[datetime] = None) -> int:
        """Change of the last 7 days against the 7 before, as a percentage."""
        now = self._now(now)
        one_week_ago = now - timedelta(days=7)
        two_weeks_ago = now - timedelta(days=14)

        last_week = previous_week = 0
        for r in reflections:
            if r.created_at >= one_week_ago:
                last_week += 1
            elif r.created_at >= two_weeks_ago:
                previous_week += 1

        if previous_week == 0:
            return 0
        change = last_week - previous_week
        if change < 0:
            return -rate_percent(-change, previous_week)
        return rate_percent(change, previous_week)

    # === Themes ===

    def top_themes(
        self,
        reflections: Iterable[Reflection],
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
    ) -> list[ThemeCount]:
        """Most frequent tags, ties broken by first appearance."""
        limit = require_positive("limit", limit if limit is not None else self.config.top_themes_limit)

        counts: Counter[str] = Counter()
        for reflection in reflections:
            if since is not None and reflection.created_at < since:
                continue
            counts.update(reflection.tags)

        # Counter preserves first-insertion order and sorted() is stable
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [ThemeCount(theme, count) for theme, count in ranked[:limit]]

    def suggested_themes(
        self,
        questions_answers: Iterable[ReflectionQA],
        existing_tags: Iterable[str] = (),
        limit: Optional[int] = None,
    ) -> list[str]:
        """Themes whose keywords appear in the answers and are not yet tagged."""
        limit = require_positive("limit", limit if limit is not None else self.config.suggested_themes_limit)

        text = " ".join(qa.answer for qa in questions_answers if qa.answer).lower()
        if not text:
            return []

        tagged = {normalize_tag(tag) for tag in existing_tags}
        suggestions = []
        for theme, keywords in THEME_KEYWORDS:
            if theme in tagged:
                continue
            if any(keyword in text for keyword in keywords):
                suggestions.append(theme)
        return suggestions[:limit]

    # === Mood ===

    @staticmethod
    def mood_trend(current: Reflection, reflections: Iterable[Reflection]) -> Optional[MoodTrend]:
        """Compare `current` with the reflection created immediately before it."""
        if current.mood is None:
            return None

        previous: Optional[Reflection] = None
        for r in reflections:
            if r.id == current.id or r.created_at >= current.created_at:
                continue
            if previous is None or r.created_at > previous.created_at:
                previous = r

        if previous is None or previous.mood is None:
            return None

        now_index = MOOD_SCALE.index(current.mood)
        before_index = MOOD_SCALE.index(previous.mood)
        if now_index > before_index:
            return MoodTrend.MORE_POSITIVE
        if now_index < before_index:
            return MoodTrend.LOWER_ENERGY
        return MoodTrend.CONSISTENT

    @staticmethod
    def mood_distribution(reflections: Iterable[Reflection]) -> list[MoodCount]:
        counts: Counter[ReflectionMood] = Counter(r.mood for r in reflections if r.mood is not None)
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [MoodCount(mood, count) for mood, count in ranked]

    # === Report ===

    def analyze(
        self,
        reflections: Iterable[Reflection],
        commitments: Iterable[Commitment] = (),
        time_range: TimeRange = TimeRange.MONTH,
        now: Optional[datetime] = None,
    ) -> ReflectionRhythmReport:
        """Compute the insights report. Streaks and rhythm ignore the range."""
        now = self._now(now)
        reflections = list(reflections)
        filtered = self.filter_by_range(reflections, time_range, now)

        generated_ids = {cid for r in filtered for cid in r.generated_commitment_ids}
        completed = sum(
            1 for c in commitments
            if c.id in generated_ids and c.status == CommitmentStatus.DONE
        )
        generated = sum(len(r.generated_commitment_ids) for r in filtered)

        report = ReflectionRhythmReport(
            time_range=time_range,
            total_reflections=len(filtered),
            completed_reflections=sum(1 for r in filtered if r.is_complete),
            quick_reflections=sum(1 for r in filtered if r.reflection_type == ReflectionType.QUICK),
            weekly_streak=self.weekly_streak(reflections, now),
            best_streak=self.best_streak(reflections, now),
            rhythm_status=self.rhythm_status(reflections, now),
            weekly_average=self.weekly_average(filtered, time_range, now),
            weekly_trend_percent=self.weekly_trend_percent(reflections, now),
            top_themes=self.top_themes(filtered),
            mood_distribution=self.mood_distribution(filtered),
            commitments_generated=generated,
            commitments_completed=completed,
            commitment_completion_rate=rate_percent(completed, generated),
        )

        logger.debug(
            f"Rhythm over {report.total_reflections} reflections ({time_range.value}): "
            f"streak {report.weekly_streak}, status {report.rhythm_status.state.value}"
        )
        return report
