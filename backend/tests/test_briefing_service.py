"""Tests for dashboard composition and project prep briefings."""

import pytest
from datetime import timedelta

from conftest import NOW, days, make_commitment, make_decision, make_entry, make_project, make_reflection
from compass.models import CommitmentDirection, CommitmentStatus, DecisionOutcome, ProjectStatus
from compass.services.briefing_service import BriefingService
from compass.services.reflection_prompt_service import WeeklyPrompt


@pytest.fixture
def service(clock, config):
    return BriefingService(clock, config)


class TestDashboard:
    def test_sections(self, service):
        project = make_project()
        commitments = [
            make_commitment(due_date=NOW - days(1)),
            make_commitment(direction=CommitmentDirection.WAITING_FOR, created_at=NOW - days(20)),
        ]
        entries = [make_entry(project_id=project.id), make_decision(decision_review_date=NOW - days(2))]

        dashboard = service.dashboard(commitments, entries, [], [project])

        assert len(dashboard.commitments.prioritized) == 1
        assert len(dashboard.commitments.stale_waiting_for) == 1
        assert len(dashboard.decisions.prioritized) == 1
        assert isinstance(dashboard.reflection_prompt, WeeklyPrompt)
        assert dashboard.quick_stats.active_projects == 1
        assert dashboard.quick_stats.open_i_owe == 1
        assert dashboard.quick_stats.open_waiting_for == 1
        # The decision happened last week
        assert dashboard.quick_stats.entries_this_week == 1
        assert dashboard.generated_at == NOW

    def test_attention_projects(self, service):
        quiet = [make_project(priority=4, last_active_at=NOW - days(60)) for _ in range(4)]
        low_priority = make_project(priority=2, last_active_at=NOW - days(90))
        paused = make_project(priority=5, last_active_at=NOW - days(90), status=ProjectStatus.ON_HOLD)
        recent = make_project(priority=5, last_active_at=NOW - days(10))

        result = service.attention_projects([low_priority, paused, recent] + quiet)

        assert result == quiet[:3]

    def test_attention_threshold_is_inclusive(self, service):
        edge = make_project(priority=3, last_active_at=NOW - days(45))
        assert service.attention_projects([edge]) == [edge]


class TestProjectPrep:
    def test_prep(self, service):
        project = make_project()
        other = make_project()
        undated = make_commitment(project_id=project.id, priority_score=80)
        later = make_commitment(project_id=project.id, due_date=NOW + days(5))
        overdue = make_commitment(project_id=project.id, due_date=NOW - days(2))
        waiting = make_commitment(project_id=project.id, direction=CommitmentDirection.WAITING_FOR)
        closed = make_commitment(project_id=project.id, status=CommitmentStatus.DONE)
        elsewhere = make_commitment(project_id=other.id)

        entries = [make_entry(project_id=project.id, occurred_at=NOW - days(i + 1)) for i in range(12)]
        entries.append(make_entry(project_id=project.id, occurred_at=NOW - timedelta(hours=1), is_deleted=True))
        pending = make_decision(project_id=project.id)
        reviewed = make_decision(project_id=project.id, decision_outcome=DecisionOutcome.VALIDATED)
        entries += [pending, reviewed]

        prep = service.project_prep(
            project,
            entries,
            [undated, later, overdue, waiting, closed, elsewhere],
            [],
        )

        assert prep.i_owe == [overdue, later, undated]
        assert prep.waiting_for == [waiting]
        assert prep.overdue == [overdue]
        assert prep.pending_decisions == [pending]
        assert len(prep.recent_entries) == 10
        assert all(not e.is_deleted for e in prep.recent_entries)
        assert prep.recent_entries[0].occurred_at == NOW - days(1)
        assert prep.needs_reflection
        assert prep.days_since_reflection is None

    def test_ai_context(self, service):
        project = make_project(name="Platform migration")
        commitment = make_commitment(project_id=project.id, due_date=NOW - days(1), counterparty="Dana")
        reflection = make_reflection(project_id=project.id, created_at=NOW - days(3))

        prep = service.project_prep(project, [], [commitment], [reflection])
        context = prep.ai_context

        assert context["project"]["name"] == "Platform migration"
        assert context["i_owe"][0]["counterparty"] == "Dana"
        assert context["i_owe"][0]["overdue"] is True
        assert context["days_since_reflection"] == 3
        assert context["generated_at"] == NOW.isoformat()
