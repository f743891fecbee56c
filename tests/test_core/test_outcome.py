import pytest

from dupsweep.core import CandidateRecord, DuplicateOutcome, OutcomeKind, RunSummary
from tests.helpers import candidate_row


def _outcome(kind: OutcomeKind, id_: int) -> DuplicateOutcome:
    return DuplicateOutcome.for_candidate(
        kind, CandidateRecord.from_dict(candidate_row(id_, "itemreceipt", "RA-1"))
    )


def test_outcome_identity_and_transport():
    outcome = _outcome(OutcomeKind.ERROR, 11)
    assert outcome.identity == "RA-1-itemreceipt-11"
    assert outcome.as_dict()["kind"] == "error-delete"
    assert DuplicateOutcome.from_dict(outcome.as_dict()) == outcome


def test_unknown_kind_is_rejected():
    data = _outcome(OutcomeKind.SUCCESS, 1).as_dict()
    data["kind"] = "maybe-delete"
    with pytest.raises(ValueError):
        DuplicateOutcome.from_dict(data)


def test_summary_buckets_preserve_encounter_order():
    summary = RunSummary()
    for outcome in [
        _outcome(OutcomeKind.SUCCESS, 3),
        _outcome(OutcomeKind.ERROR, 2),
        _outcome(OutcomeKind.SUCCESS, 1),
        _outcome(OutcomeKind.PLANNED, 4),
    ]:
        summary.add(outcome)
    assert summary.successes == ["RA-1-itemreceipt-3", "RA-1-itemreceipt-1"]
    assert summary.errors == ["RA-1-itemreceipt-2"]
    assert summary.planned == ["RA-1-itemreceipt-4"]
    assert (summary.success_count, summary.error_count, summary.planned_count) == (2, 1, 1)
    assert summary.total == 4
    assert summary.as_dict()["complete"] is True
