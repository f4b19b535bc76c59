"""
Prioritization and analytics engine configuration.

All caps, windows and heuristic thresholds are configurable here. The
defaults are the product constants the dashboard and insight screens are
built around; change them only when the product decision changes.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class EngineConfig(BaseSettings):
    """Configuration for the prioritization and analytics engine."""

    # === Commitment urgency ===
    commitment_list_cap: int = 5
    commitment_overdue_cap: int = 2
    commitment_near_term_cap: int = 4  # overdue + due this week
    commitment_due_window_days: int = 7
    high_priority_score_threshold: float = 50.0
    stale_waiting_for_days: int = 14

    # === Decision review ===
    decision_review_cap: int = 4
    decision_due_window_days: int = 7
    stale_decision_days: int = 30

    # === Reflection prompting ===
    quick_reflection_daily_cap: int = 3
    busy_week_entry_threshold: int = 5
    weekly_reflection_max_age_days: int = 7
    project_reflection_gap_days: int = 14
    project_reflection_default_days: int = 30  # assumed when a project was never reflected on
    quick_prompt_min_content_length: int = 20

    # === Calibration heuristic ===
    calibration_overconfidence_gap: int = 20
    calibration_well_calibrated_floor: int = 70
    calibration_min_levels: int = 2
    recent_decisions_limit: int = 5

    # === Reflection rhythm ===
    top_themes_limit: int = 6
    suggested_themes_limit: int = 4

    # === Dashboard ===
    attention_min_priority: int = 3
    attention_inactive_days: int = 45
    attention_projects_limit: int = 3
    prep_recent_entries_limit: int = 10
    prep_day_range_days: int = 90

    class Config:
        env_prefix = "ENGINE_"


# Global instance
_engine_config: Optional[EngineConfig] = None


def get_engine_config() -> EngineConfig:
    """Get the engine configuration singleton."""
    global _engine_config
    if _engine_config is None:
        _engine_config = EngineConfig()
    return _engine_config
