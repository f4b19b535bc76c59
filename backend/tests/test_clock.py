"""Tests for calendar boundaries evaluated in a non-UTC timezone."""

import pytest
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo
from pydantic import ValidationError

from conftest import make_decision, make_reflection
from compass.api.deps import get_clock
from compass.config import Settings, get_settings
from compass.services.clock import (
    FixedClock,
    SystemClock,
    is_same_day,
    start_of_iso_week,
    start_of_quarter,
)
from compass.services.decision_calibration_service import DecisionCalibrationService
from compass.services.reflection_prompt_service import ReflectionPromptService
from compass.services.reflection_rhythm_service import ReflectionRhythmService, RhythmState

NEW_YORK = ZoneInfo("America/New_York")

# Wednesday evening in New York is already Thursday in UTC
EVENING = datetime(2026, 3, 18, 21, 0, tzinfo=NEW_YORK)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestCalendarHelpers:
    def test_start_of_week_is_local_monday(self):
        assert start_of_iso_week(EVENING) == datetime(2026, 3, 16, tzinfo=NEW_YORK)
        assert start_of_iso_week(EVENING) == utc(2026, 3, 16, 4)

    def test_week_before_dst_change_starts_in_standard_time(self):
        monday = start_of_iso_week(datetime(2026, 3, 8, 12, 0, tzinfo=NEW_YORK))
        assert monday == utc(2026, 3, 2, 5)

    def test_quarter_starts_at_local_midnight(self):
        now = datetime(2026, 4, 1, 0, 30, tzinfo=NEW_YORK)
        assert start_of_quarter(now) == utc(2026, 4, 1, 4)

    def test_same_day_uses_local_date(self):
        assert is_same_day(utc(2026, 3, 18, 13), EVENING)
        assert not is_same_day(utc(2026, 3, 19, 5), EVENING)


class TestReflectedToday:
    def test_local_day_boundaries(self, config):
        service = ReflectionPromptService(FixedClock(EVENING), config)
        morning = make_reflection(created_at=utc(2026, 3, 18, 13))
        previous_night = make_reflection(created_at=datetime(2026, 3, 17, 23, 59, tzinfo=NEW_YORK))

        assert service.has_reflected_today([morning])
        assert not service.has_reflected_today([previous_night])


class TestQuarterRollover:
    def test_local_quarter(self, config):
        """03:00Z on April 1 is still March 31 in New York."""
        service = DecisionCalibrationService(FixedClock(datetime(2026, 4, 1, 0, 30, tzinfo=NEW_YORK)), config)
        entries = [
            make_decision(occurred_at=utc(2026, 4, 1, 3)),
            make_decision(occurred_at=utc(2026, 4, 1, 4, 10)),
        ]

        assert service.decisions_this_quarter(entries) == 1


class TestLocalStreaks:
    @pytest.fixture
    def service(self, config):
        return ReflectionRhythmService(FixedClock(datetime(2026, 3, 18, 12, 0, tzinfo=NEW_YORK)), config)

    def test_streak_across_dst_change(self, service):
        now = service.clock.now()
        reflections = [make_reflection(created_at=now - timedelta(weeks=w)) for w in range(4)]

        assert service.weekly_streak(reflections) == 4
        assert service.best_streak(reflections) == 4

    def test_sunday_night_belongs_to_local_week(self, service):
        """Sunday 22:00 in New York is Monday in UTC; locally it leaves a gap."""
        now = service.clock.now()
        reflections = [
            make_reflection(created_at=now),
            make_reflection(created_at=datetime(2026, 3, 8, 22, 0, tzinfo=NEW_YORK)),
        ]

        assert service.weekly_streak(reflections) == 1

    def test_monday_grace_period(self, config):
        service = ReflectionRhythmService(FixedClock(datetime(2026, 3, 16, 1, 0, tzinfo=NEW_YORK)), config)
        sunday_night = make_reflection(created_at=datetime(2026, 3, 15, 22, 0, tzinfo=NEW_YORK))

        status = service.rhythm_status([sunday_night])

        assert status.state == RhythmState.DUE_TODAY


class TestGetClock:
    def test_uses_default_timezone(self, monkeypatch, settings_cache):
        monkeypatch.setenv("DEFAULT_TIMEZONE", "America/New_York")

        clock = get_clock()

        assert isinstance(clock, SystemClock)
        assert clock.tz == NEW_YORK
        assert clock.now().tzinfo == NEW_YORK


class TestSettings:
    def test_rejects_unknown_timezone(self):
        with pytest.raises(ValidationError):
            Settings(default_timezone="Mars/Olympus")

    def test_fields(self):
        assert set(Settings.model_fields) == {
            "default_timezone",
            "log_level",
            "rate_limit",
            "redis_url",
            "environment",
            "cors_allowed_origins",
            "sentry_dsn",
        }
