"""API tests for the engine endpoints."""

import pytest
from datetime import timedelta

from conftest import NOW, days, dump, make_commitment, make_decision, make_entry, make_project, make_reflection
from compass.models import DecisionOutcome, ReflectionMood


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestDashboardAPI:
    """Test POST /dashboard."""

    @pytest.mark.asyncio
    async def test_dashboard(self, client):
        project = make_project(priority=4, last_active_at=NOW - days(60))
        body = {
            "commitments": dump(
                make_commitment(due_date=NOW - days(1)),
                make_commitment(due_date=NOW + days(3)),
                make_commitment(priority_score=80),
            ),
            "entries": dump(make_decision(decision_review_date=NOW - days(2))),
            "reflections": [],
            "projects": dump(project),
        }

        response = await client.post("/dashboard", json=body)

        assert response.status_code == 200
        data = response.json()
        assert [c["urgency"] for c in data["commitments"]] == ["overdue", "due_this_week", "high_priority"]
        assert data["commitments"][0]["days_overdue"] == 1
        assert data["decision_reviews"][0]["label"] == "2d overdue"
        assert data["reflection_prompt"]["kind"] == "weekly_prompt"
        assert data["quick_stats"]["open_i_owe"] == 3
        assert [p["id"] for p in data["attention_projects"]] == [project.id]

    @pytest.mark.asyncio
    async def test_empty_snapshot(self, client):
        response = await client.post("/dashboard", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["commitments"] == []
        assert data["has_commitments_to_show"] is False
        assert data["reflection_prompt"] == {"kind": "weekly_prompt", "entries_this_week": 0}

    @pytest.mark.asyncio
    async def test_negative_counter_is_a_contract_error(self, client):
        response = await client.post("/dashboard", json={"quick_prompts_shown_today": -1})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "EngineContractError"
        assert error["details"] == {"quick_prompts_shown_today": -1}

    @pytest.mark.asyncio
    async def test_invalid_snapshot_shape(self, client):
        entry = make_entry().model_dump(mode="json")
        entry["decision_confidence"] = 9

        response = await client.post("/dashboard", json={"entries": [entry]})

        assert response.status_code == 422


class TestInsightsAPI:
    """Test the insights endpoints."""

    @pytest.mark.asyncio
    async def test_decision_insights(self, client):
        entries = [
            make_decision(decision_confidence=5, decision_outcome=DecisionOutcome.VALIDATED),
            make_decision(decision_confidence=5, decision_outcome=DecisionOutcome.VALIDATED),
            make_decision(decision_confidence=5, decision_outcome=DecisionOutcome.VALIDATED),
            make_decision(decision_confidence=5, decision_outcome=DecisionOutcome.INVALIDATED),
            make_decision(decision_confidence=1, decision_outcome=DecisionOutcome.INVALIDATED),
        ]

        response = await client.post("/insights/decisions", json={"entries": dump(*entries)})

        assert response.status_code == 200
        data = response.json()
        assert data["confidence_calibration"] == {"1": 0, "5": 75}
        assert data["validation_rate"] == 60
        assert data["outcome_distribution"]["validated"] == 3
        assert data["calibration_insight"] is None

    @pytest.mark.asyncio
    async def test_decision_insights_empty(self, client):
        response = await client.post("/insights/decisions", json={"entries": []})

        data = response.json()
        assert data["validation_rate"] == 0
        assert data["outcome_distribution"] == {
            "validated": 0,
            "invalidated": 0,
            "mixed": 0,
            "superseded": 0,
        }
        assert data["calibration_insight"] is None
        assert data["calibration_message"] is None

    @pytest.mark.asyncio
    async def test_reflection_insights(self, client):
        reflections = [
            make_reflection(created_at=NOW - days(1), tags=["hiring"], mood=ReflectionMood.CONFIDENT),
            make_reflection(created_at=NOW - timedelta(weeks=1), tags=["hiring", "conflict"]),
        ]

        response = await client.post(
            "/insights/reflections",
            params={"time_range": "quarter"},
            json={"reflections": dump(*reflections), "commitments": []},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["time_range"] == "quarter"
        assert data["weekly_streak"] == 2
        assert data["rhythm_status"] == {"state": "streak", "streak": 2}
        assert data["top_themes"][0] == {"theme": "hiring", "count": 2}

    @pytest.mark.asyncio
    async def test_unknown_time_range(self, client):
        response = await client.post("/insights/reflections", params={"time_range": "decade"}, json={})
        assert response.status_code == 422


class TestProjectPrepAPI:
    @pytest.mark.asyncio
    async def test_prep(self, client):
        project = make_project()
        body = {
            "project": project.model_dump(mode="json"),
            "entries": dump(make_entry(project_id=project.id)),
            "commitments": dump(make_commitment(project_id=project.id, due_date=NOW - days(1))),
            "reflections": [],
        }

        response = await client.post(f"/projects/{project.id}/prep", json=body)

        assert response.status_code == 200
        data = response.json()
        assert len(data["overdue"]) == 1
        assert data["needs_reflection"] is True
        assert data["ai_context"]["project"]["id"] == project.id

    @pytest.mark.asyncio
    async def test_path_must_match_body(self, client):
        body = {"project": make_project().model_dump(mode="json")}
        response = await client.post("/projects/someone-else/prep", json=body)
        assert response.status_code == 422


class TestActionsAPI:
    """Test commitment and decision actions."""

    @pytest.mark.asyncio
    async def test_complete_and_reopen(self, client):
        commitment = make_commitment()
        body = {"commitment": commitment.model_dump(mode="json")}

        completed = await client.post("/commitments/complete", json=body)
        reopened = await client.post("/commitments/reopen", json=body)

        assert completed.status_code == 200
        assert completed.json()["status"] == "done"
        assert completed.json()["completed_at"] is not None
        assert reopened.json()["status"] == "open"
        assert reopened.json()["completed_at"] is None

    @pytest.mark.asyncio
    async def test_review_decision(self, client):
        decision = make_decision()
        response = await client.post(
            "/decisions/review",
            json={"entry": decision.model_dump(mode="json"), "outcome": "mixed"},
        )

        assert response.status_code == 200
        assert response.json()["entry_id"] == decision.id
        assert response.json()["decision_outcome"] == "mixed"

    @pytest.mark.asyncio
    async def test_review_with_pending_is_rejected(self, client):
        response = await client.post(
            "/decisions/review",
            json={"entry": make_decision().model_dump(mode="json"), "outcome": "pending"},
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "EngineContractError"


class TestReflectionsAPI:
    @pytest.mark.asyncio
    async def test_suggested_themes(self, client):
        body = {
            "questions_answers": [{"question": "What was hard?", "answer": "Giving feedback to Sam"}],
            "tags": [],
        }
        response = await client.post("/reflections/suggested-themes", json=body)

        assert response.status_code == 200
        assert response.json()["themes"] == ["feedback"]

    @pytest.mark.asyncio
    async def test_quick_prompt(self, client):
        entry = make_entry(title="1:1 with Dana", raw_content="Talked about the promotion timeline")
        response = await client.post(
            "/reflections/quick-prompt",
            json={"entry": entry.model_dump(mode="json"), "quick_reflections_today": 1},
        )

        data = response.json()
        assert data["should_prompt"] is True
        assert data["questions"] == ["How confident are you in how this went?"]

    @pytest.mark.asyncio
    async def test_default_questions(self, client):
        response = await client.get(
            "/reflections/default-questions",
            params={"reflection_type": "periodic", "period_type": "quarter"},
        )

        data = response.json()
        assert data["period_type"] == "quarter"
        assert len(data["questions"]) == 5
