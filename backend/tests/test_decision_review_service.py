"""Tests for decision review prioritization and the review action."""

import pytest

from conftest import NOW, days, make_decision, make_entry
from compass.exceptions import EngineContractError
from compass.models import DecisionOutcome
from compass.services.decision_review_service import (
    DecisionReviewReason,
    DecisionReviewService,
    review_label,
)


@pytest.fixture
def service(clock, config):
    return DecisionReviewService(clock, config)


class TestDecisionFilters:
    def test_deleted_and_plain_entries_are_not_decisions(self, service):
        live = make_decision()
        deleted = make_decision(is_deleted=True)
        note = make_entry()
        assert service.all_decisions([live, deleted, note]) == [live]

    def test_pending_includes_missing_outcome(self, service):
        unset = make_decision()
        pending = make_decision(decision_outcome=DecisionOutcome.PENDING)
        done = make_decision(decision_outcome=DecisionOutcome.VALIDATED)
        assert service.pending_decisions([unset, pending, done]) == [unset, pending]

    def test_overdue_and_due_soon(self, service):
        overdue = make_decision(decision_review_date=NOW - days(3))
        soon = make_decision(decision_review_date=NOW + days(2))
        later = make_decision(decision_review_date=NOW + days(10))
        entries = [later, soon, overdue]

        assert service.overdue(entries) == [overdue]
        assert service.due_soon(entries) == [soon]

    def test_reviewed_decisions_drop_out(self, service):
        reviewed = make_decision(
            decision_review_date=NOW - days(3),
            decision_outcome=DecisionOutcome.MIXED,
        )
        assert service.overdue([reviewed]) == []

    def test_stale_requires_no_review_date(self, service):
        """Unscheduled and older than 30 days; input order kept."""
        old = make_decision(occurred_at=NOW - days(45))
        scheduled = make_decision(occurred_at=NOW - days(45), decision_review_date=NOW + days(30))
        recent = make_decision(occurred_at=NOW - days(5))
        older = make_decision(occurred_at=NOW - days(90))
        assert service.stale([old, scheduled, recent, older]) == [old, older]


class TestPrioritize:
    def test_review_debt_fills_the_list_first(self, service):
        """All overdue go before due soon and stale; truncated to 4."""
        overdue = [make_decision(decision_review_date=NOW - days(i + 1)) for i in range(3)]
        soon = [make_decision(decision_review_date=NOW + days(i + 1)) for i in range(3)]
        stale = [make_decision(occurred_at=NOW - days(60))]

        result = service.prioritize(soon + stale + overdue)

        assert len(result) == 4
        assert [p.reason for p in result] == [
            DecisionReviewReason.OVERDUE,
            DecisionReviewReason.OVERDUE,
            DecisionReviewReason.OVERDUE,
            DecisionReviewReason.DUE_SOON,
        ]
        assert result[0].entry == overdue[-1]
        assert result[3].entry == soon[0]

    def test_labels(self, service):
        overdue = make_decision(decision_review_date=NOW - days(3.5))
        soon = make_decision(decision_review_date=NOW + days(2.5))
        stale = make_decision(occurred_at=NOW - days(60))

        labels = [p.label for p in service.prioritize([overdue, soon, stale])]

        assert labels == ["3d overdue", "due in 2d", "needs review"]

    def test_due_today_labels(self):
        assert review_label(DecisionReviewReason.OVERDUE, 0) == "due today"
        assert review_label(DecisionReviewReason.DUE_SOON, 0) == "due today"
        assert review_label(DecisionReviewReason.STALE, None) == "needs review"

    @pytest.mark.parametrize("count", [0, 2, 5, 12])
    def test_never_more_than_four(self, service, count):
        entries = [make_decision(decision_review_date=NOW - days(i + 1)) for i in range(count)]
        result = service.prioritize(entries)
        assert len(result) == min(count, 4)
        assert (len(result) == 0) == (not service.has_decisions_to_show(entries))

    def test_classify_report(self, service):
        entries = [
            make_decision(decision_review_date=NOW - days(1)),
            make_decision(),
            make_decision(decision_outcome=DecisionOutcome.VALIDATED),
        ]
        report = service.classify(entries)

        assert report.pending_count == 2
        assert len(report.overdue) == 1
        assert report.has_decisions_to_show
        assert service.classify(entries) == report


class TestReview:
    """Test the review action."""

    def test_review_records_outcome(self, service):
        decision = make_decision(decision_review_date=NOW - days(1))
        update = service.review(decision, DecisionOutcome.VALIDATED)

        assert update.entry_id == decision.id
        assert update.decision_outcome == DecisionOutcome.VALIDATED
        assert update.decision_outcome_date == NOW

    def test_re_review_overwrites(self, service):
        decision = make_decision(decision_outcome=DecisionOutcome.VALIDATED)
        update = service.review(decision, DecisionOutcome.INVALIDATED)
        assert update.decision_outcome == DecisionOutcome.INVALIDATED

    def test_pending_outcome_rejected(self, service):
        with pytest.raises(EngineContractError) as exc_info:
            service.review(make_decision(), DecisionOutcome.PENDING)
        assert exc_info.value.details["outcome"] == "pending"

    def test_non_decision_rejected(self, service):
        with pytest.raises(EngineContractError):
            service.review(make_entry(), DecisionOutcome.VALIDATED)

    def test_deleted_decision_rejected(self, service):
        with pytest.raises(EngineContractError):
            service.review(make_decision(is_deleted=True), DecisionOutcome.MIXED)
