import pytest

from dupsweep.core import (
    Batch,
    ErrorHandlingMethod,
    OutcomeKind,
    Record,
    RunSummary,
    SinkError,
)
from dupsweep.sinks import RunSummarySink, aggregate

pytestmark = [pytest.mark.stage]


def _outcome_record(kind: OutcomeKind, id_: int, parent_id: str = "RA-1") -> Record:
    return Record(
        data={
            "kind": kind.value,
            "parent_id": parent_id,
            "record_type": "itemreceipt",
            "id": id_,
            "cause": None,
        },
        key=kind.value,
    )


def test_aggregate_classifies_in_encounter_order():
    summary = aggregate(
        [
            _outcome_record(OutcomeKind.SUCCESS, 11),
            _outcome_record(OutcomeKind.ERROR, 21, "RA-2"),
            _outcome_record(OutcomeKind.SUCCESS, 13),
        ]
    )
    assert summary.successes == ["RA-1-itemreceipt-11", "RA-1-itemreceipt-13"]
    assert summary.errors == ["RA-2-itemreceipt-21"]
    assert summary.complete is True


def test_aggregate_of_nothing_is_empty():
    assert aggregate([]) == RunSummary()


def test_aggregate_keeps_partial_summary_on_bad_record():
    records = [
        _outcome_record(OutcomeKind.SUCCESS, 11),
        Record(data={"kind": "shrug"}),
        _outcome_record(OutcomeKind.SUCCESS, 12),
    ]
    with pytest.raises(SinkError) as excinfo:
        aggregate(records)
    partial = excinfo.value.summary
    assert partial.successes == ["RA-1-itemreceipt-11"]
    assert partial.complete is False


def test_sink_reports_summary():
    reported = []
    sink = RunSummarySink(reporter=reported.append)
    batch = Batch(records=[_outcome_record(OutcomeKind.SUCCESS, 11)])
    assert sink(batch) is batch
    assert reported == [sink.summary]
    assert sink.summary.success_count == 1


def test_default_reporter_logs_counts_and_identities(caplog):
    RunSummarySink()(
        Batch(
            records=[
                _outcome_record(OutcomeKind.SUCCESS, 11),
                _outcome_record(OutcomeKind.ERROR, 12),
            ]
        )
    )
    assert "1 successes ['RA-1-itemreceipt-11']" in caplog.text
    assert "1 errors ['RA-1-itemreceipt-12']" in caplog.text
    assert "planned deletions" not in caplog.text


def test_default_reporter_logs_planned(caplog):
    RunSummarySink()(Batch(records=[_outcome_record(OutcomeKind.PLANNED, 11)]))
    assert "0 successes []" in caplog.text
    assert "1 planned deletions ['RA-1-itemreceipt-11']" in caplog.text


def test_sink_reports_partial_summary_on_bad_record(caplog):
    reported = []
    sink = RunSummarySink(reporter=reported.append)
    sink(Batch(records=[_outcome_record(OutcomeKind.ERROR, 1), Record(data={})]))
    assert reported[0].errors == ["RA-1-itemreceipt-1"]
    assert reported[0].complete is False
    assert "Unable to summarize, stopped after 1 outcomes." in caplog.text


def test_sink_raises_when_asked():
    sink = RunSummarySink(
        reporter=lambda summary: None,
        error_handling_method=ErrorHandlingMethod.RAISE,
    )
    with pytest.raises(SinkError):
        sink(Batch(records=[Record(data={})]))
