from typing import Callable, Iterable

from dupsweep.core import (
    Batch,
    DuplicateOutcome,
    ErrorHandlingMethod,
    Record,
    RunSummary,
    Sink,
    SinkError,
)

# Type aliases
Reporter = Callable[[RunSummary], None]


def aggregate(records: Iterable[Record]) -> RunSummary:
    """Classify emitted outcome records into a `RunSummary` in a single pass.

    A record that cannot be read stops aggregation; the summary then reflects
    only the outcomes read before it and is marked incomplete.

    Raises:
        SinkError: Chained to the read error, with the partial summary attached as `.summary`.
    """
    summary = RunSummary()
    try:
        for record in records:
            summary.add(DuplicateOutcome.from_dict(record.data))
    except Exception as e:
        summary.complete = False
        error = SinkError(
            stage_name="aggregate",
            message=f"Unable to summarize, stopped after {summary.total} outcomes.",
            handling_method=ErrorHandlingMethod.SEND_TO_ERROR,
        )
        error.__cause__ = e
        error.summary = summary  # type: ignore[attr-defined]
        raise error
    return summary


class RunSummarySink(Sink):
    """Summarize stage. Aggregates every outcome of the run and hands the summary to a reporter."""

    def __init__(
        self,
        reporter: Reporter | None = None,
        name: str | None = None,
        error_handling_method: ErrorHandlingMethod = ErrorHandlingMethod.DEFAULT,
        expose_metrics: bool = False,
    ) -> None:
        """Initialize the `RunSummarySink`.

        Args:
            reporter (Callable[[RunSummary], None], optional): Receives the summary at the end of the run. Defaults to logging counts and identity lists.
            name (str, optional): Stage name. Defaults to class name if name = None.
            error_handling_method (ErrorHandlingMethod, optional): Enum that represents how the stage would like the pipeline to handle errors which occur when running this stage. By default, a read error yields a partial summary.
            expose_metrics (bool, optional): Whether or not to expose metrics for this sink. Defaults to False.
        """
        Sink.__init__(
            self,
            name=name,
            error_handling_method=error_handling_method,
            expose_metrics=expose_metrics,
        )
        self.reporter = reporter or self.log_summary
        self.summary: RunSummary | None = None

    def log_summary(self, summary: RunSummary) -> None:
        self.log.info(f"{summary.success_count} successes {summary.successes}")
        self.log.info(f"{summary.error_count} errors {summary.errors}")
        if summary.planned:
            self.log.info(f"{summary.planned_count} planned deletions {summary.planned}")

    def process_batch(self, batch: Batch) -> Batch:
        try:
            summary = aggregate(batch.records)
        except SinkError as e:
            if self.error_handling_method == ErrorHandlingMethod.RAISE:
                raise e
            self.log.error(self.serialize(e.as_dict()))
            summary = e.summary  # type: ignore[attr-defined]
        self.summary = summary
        self.reporter(summary)
        return batch
