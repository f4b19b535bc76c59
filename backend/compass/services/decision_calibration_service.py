"""
Decision Calibration Service

Compares stated confidence with how decisions actually turned out.

Rates are integer percentages rounded half up. Every rate is 0 when there
is nothing to divide by, except the per-confidence calibration map, which
simply has no key for a level without reviewed decisions ("no data" is not
the same as 0%).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from compass.engine_config import EngineConfig, get_engine_config
from compass.models.entry import (
    DecisionOutcome,
    DecisionStakes,
    Entry,
    REVIEWED_OUTCOMES,
)
from compass.services.clock import Clock, local, require_aware, start_of_quarter

logger = logging.getLogger(__name__)

CONFIDENCE_LEVELS = (1, 2, 3, 4, 5)


def rate_percent(numerator: int, denominator: int) -> int:
    """100 * numerator / denominator rounded half up; 0 for an empty denominator."""
    if denominator == 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)


class CalibrationInsight(str, Enum):
    """Heuristic read of the calibration table."""
    OVERCONFIDENT = "overconfident"
    WELL_CALIBRATED = "well_calibrated"


CALIBRATION_MESSAGES = {
    CalibrationInsight.OVERCONFIDENT: (
        "Your high-confidence decisions don't validate much better than "
        "low-confidence ones. Consider slowing down on \"sure things.\""
    ),
    CalibrationInsight.WELL_CALIBRATED: (
        "Good calibration! Your confidence levels align well with actual outcomes."
    ),
}


@dataclass
class DecisionCalibrationReport:
    """Longitudinal decision statistics for the insights screen."""

    total_decisions: int = 0
    reviewed_count: int = 0
    pending_review_count: int = 0
    validation_rate: int = 0
    outcome_distribution: dict[DecisionOutcome, int] = field(default_factory=dict)
    confidence_calibration: dict[int, int] = field(default_factory=dict)
    decisions_by_confidence: dict[int, int] = field(default_factory=dict)
    calibration_insight: Optional[CalibrationInsight] = None
    stakes_validation_rates: dict[DecisionStakes, int] = field(default_factory=dict)
    decisions_by_stakes: dict[DecisionStakes, int] = field(default_factory=dict)
    decisions_this_quarter: int = 0
    recent_decisions: list[Entry] = field(default_factory=list)

    @property
    def calibration_message(self) -> Optional[str]:
        if self.calibration_insight is None:
            return None
        return CALIBRATION_MESSAGES[self.calibration_insight]


class DecisionCalibrationService:
    """Aggregates reviewed decisions into calibration statistics."""

    def __init__(self, clock: Clock, config: Optional[EngineConfig] = None):
        self.clock = clock
        self.config = config or get_engine_config()

    @staticmethod
    def decisions(entries: Iterable[Entry]) -> list[Entry]:
        return [e for e in entries if e.is_decision_entry]

    @classmethod
    def reviewed_decisions(cls, entries: Iterable[Entry]) -> list[Entry]:
        return [e for e in cls.decisions(entries) if e.has_been_reviewed]

    @staticmethod
    def _validated(decisions: Iterable[Entry]) -> int:
        return sum(1 for d in decisions if d.decision_outcome == DecisionOutcome.VALIDATED)

    def validation_rate(self, entries: Iterable[Entry]) -> int:
        reviewed = self.reviewed_decisions(entries)
        return rate_percent(self._validated(reviewed), len(reviewed))

    def outcome_distribution(self, entries: Iterable[Entry]) -> dict[DecisionOutcome, int]:
        """Count per terminal outcome; pending never appears."""
        counts = {outcome: 0 for outcome in REVIEWED_OUTCOMES}
        for decision in self.reviewed_decisions(entries):
            counts[decision.decision_outcome] += 1
        return counts

    def confidence_calibration(self, entries: Iterable[Entry]) -> dict[int, int]:
        """Validation rate per confidence level, only for levels with data."""
        reviewed = self.reviewed_decisions(entries)
        calibration: dict[int, int] = {}
        for level in CONFIDENCE_LEVELS:
            at_level = [d for d in reviewed if d.decision_confidence == level]
            if not at_level:
                continue
            calibration[level] = rate_percent(self._validated(at_level), len(at_level))
        return calibration

    def calibration_insight(self, calibration: dict[int, int]) -> Optional[CalibrationInsight]:
        """
        Read the calibration table.

        - Overconfident: level 5 validates less than 20 points better than
          level 1 (or level 2 when level 1 has no data)
        - Well calibrated: level 5 beats level 4 and reaches 70%
        Needs at least two populated levels.
        """
        if len(calibration) < self.config.calibration_min_levels:
            return None

        high = calibration.get(5)
        low = calibration.get(1, calibration.get(2))
        if high is not None and low is not None:
            if high < low + self.config.calibration_overconfidence_gap:
                return CalibrationInsight.OVERCONFIDENT

        rate4 = calibration.get(4)
        if rate4 is not None and high is not None:
            if high > rate4 and high >= self.config.calibration_well_calibrated_floor:
                return CalibrationInsight.WELL_CALIBRATED

        return None

    def stakes_validation_rate(self, entries: Iterable[Entry], stakes: DecisionStakes) -> int:
        reviewed = [d for d in self.reviewed_decisions(entries) if d.decision_stakes == stakes]
        return rate_percent(self._validated(reviewed), len(reviewed))

    def decisions_this_quarter(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> int:
        now = require_aware(now or self.clock.now())
        quarter_start = start_of_quarter(now)
        return sum(1 for d in self.decisions(entries) if local(d.occurred_at, now) >= quarter_start)

    def analyze(self, entries: Iterable[Entry], now: Optional[datetime] = None) -> DecisionCalibrationReport:
        """Compute the whole insights report for one snapshot."""
        now = require_aware(now or self.clock.now())
        entries = list(entries)
        decisions = self.decisions(entries)
        reviewed = [d for d in decisions if d.has_been_reviewed]
        calibration = self.confidence_calibration(decisions)

        by_stakes = {stakes: 0 for stakes in DecisionStakes}
        for decision in decisions:
            if decision.decision_stakes is not None:
                by_stakes[decision.decision_stakes] += 1

        by_confidence = {level: 0 for level in CONFIDENCE_LEVELS}
        for decision in decisions:
            if decision.decision_confidence is not None:
                by_confidence[decision.decision_confidence] += 1

        recent = sorted(decisions, key=lambda d: d.occurred_at, reverse=True)

        report = DecisionCalibrationReport(
            total_decisions=len(decisions),
            reviewed_count=len(reviewed),
            pending_review_count=sum(1 for d in decisions if d.needs_decision_review(now)),
            validation_rate=rate_percent(self._validated(reviewed), len(reviewed)),
            outcome_distribution=self.outcome_distribution(decisions),
            confidence_calibration=calibration,
            decisions_by_confidence=by_confidence,
            calibration_insight=self.calibration_insight(calibration),
            stakes_validation_rates={
                stakes: self.stakes_validation_rate(decisions, stakes) for stakes in DecisionStakes
            },
            decisions_by_stakes=by_stakes,
            decisions_this_quarter=self.decisions_this_quarter(decisions, now),
            recent_decisions=recent[:self.config.recent_decisions_limit],
        )

        logger.debug(
            f"Calibration over {report.reviewed_count}/{report.total_decisions} reviewed decisions: "
            f"validation {report.validation_rate}%, insight {report.calibration_insight}"
        )
        return report
