"""Clear duplicate item receipts and cash refunds created from return authorizations.

    enumerate parents' children >> key by parent >> delete excess per parent >> summarize
"""

from typing import Mapping

from dupsweep.core import DEFAULT_PAGE_SIZE, Pipeline, RecordStore, RunSummary
from dupsweep.error_handlers import ErrorHandlerFailureAction, LoggingHandler
from dupsweep.sinks import RunSummarySink
from dupsweep.sinks.run_summary import Reporter
from dupsweep.sources import CandidateSearchSource
from dupsweep.stages import DuplicateResolverStage, PartitionStage
from dupsweep.utils.parameters import ParameterSource


def build_pipeline(
    store: RecordStore,
    parent_ids: ParameterSource | str | list[str],
    parent_kind: str = "RtnAuth",
    tracked_types: Mapping[str, str] | None = None,
    allowed_count: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    map_processes: int = 1,
    reduce_processes: int = 1,
    reporter: Reporter | None = None,
    name: str = "clear-duplicate-children",
    expose_metrics: bool = False,
) -> tuple[Pipeline, RunSummarySink]:
    """Wire the four stages into a pipeline.

    Returns:
        tuple[Pipeline, RunSummarySink]: The pipeline and its summary sink, which holds the `RunSummary` after `run()`.
    """
    source = CandidateSearchSource(
        store=store,
        parent_ids=parent_ids,
        parent_kind=parent_kind,
        page_size=page_size,
        expose_metrics=expose_metrics,
    )
    mapper = PartitionStage(processes=map_processes, expose_metrics=expose_metrics)
    resolver = DuplicateResolverStage(
        store=store,
        tracked_types=tracked_types,
        allowed_count=allowed_count,
        processes=reduce_processes,
        expose_metrics=expose_metrics,
    )
    summary_sink = RunSummarySink(reporter=reporter, expose_metrics=expose_metrics)

    source >> mapper >> resolver >> summary_sink

    pipeline = Pipeline(name=name, expose_metrics=expose_metrics)
    pipeline.add_source(source)
    pipeline.add_error_handler(
        LoggingHandler(failure_action=ErrorHandlerFailureAction.LOG)
    )
    return pipeline, summary_sink


def run(
    store: RecordStore, parent_ids: ParameterSource | str | list[str], **kwargs
) -> RunSummary:
    """Build and run the pipeline once. Keyword arguments go to `build_pipeline`."""
    pipeline, summary_sink = build_pipeline(store, parent_ids, **kwargs)
    pipeline.run()
    # the sink runs even when nothing was enumerated
    return summary_sink.summary  # type: ignore[return-value]
