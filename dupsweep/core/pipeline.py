import functools
import time
from copy import deepcopy
from typing import Any, Callable

import networkx as nx
from networkx import DiGraph
from prometheus_client import Counter, Gauge, start_http_server

from dupsweep.core.batch import Batch
from dupsweep.core.error_handler import BaseErrorHandler
from dupsweep.core.exceptions import ErrorHandlingMethod
from dupsweep.core.reduce import ReduceStage
from dupsweep.core.sink import Sink
from dupsweep.core.source import Source
from dupsweep.core.stage import Stage
from dupsweep.utils.log import LoggingMixin


class Pipeline(LoggingMixin):
    """Core `Pipeline` class. Runs every source once and pushes its batch through the downstream stages."""

    __next_id = 1

    @classmethod
    def _next_id(cls) -> int:
        nxt = cls.__next_id
        cls.__next_id += 1
        return nxt

    def __init__(
        self,
        name: str | None = None,
        expose_metrics: bool = False,
        metrics_port: int = 9090,
    ) -> None:
        """
        Args:
            name (str, optional): Pipeline name. Defaults to "Pipeline".
            expose_metrics (bool, optional): Whether to expose metrics for the pipeline. Defaults to False.
            metrics_port (int, optional): Port of the Prometheus HTTP server. Defaults to 9090.
        """
        if name is None:
            name = self.__class__.__name__
        self.name = name
        self.id = self._next_id()
        self.sources: list[Source] = []
        self.error_handlers: list[BaseErrorHandler] = []
        self._validated: bool = False
        self.expose_metrics = expose_metrics
        self.metrics_port = metrics_port
        if self.expose_metrics:
            self._expose_metrics()

    def _expose_metrics(self) -> None:  # pragma: no cover
        """Expose metrics for the pipeline."""

        start_http_server(self.metrics_port)

        self.runs_processed = Counter(
            "dupsweep_runs_processed",
            "Number of runs processed by the pipeline",
            ["pipeline_name"],
        )

        self.records_processed = Counter(
            "dupsweep_records_processed",
            "Number of records processed by the pipeline",
            ["pipeline_name", "stage_name"],
        )

        self.records_errored = Counter(
            "dupsweep_records_errored",
            "Number of records errored by the pipeline",
            ["pipeline_name", "stage_name"],
        )

        self.deletions = Counter(
            "dupsweep_deletions",
            "Number of duplicate deletion attempts by outcome",
            ["pipeline_name", "outcome"],
        )

        self.pipeline_processing_time = Gauge(
            "dupsweep_pipeline_processing_time",
            "Seconds taken to process pipeline",
            ["pipeline_name"],
        )

        self.stage_processing_time = Gauge(
            "dupsweep_stage_processing_time",
            "Seconds taken to process a stage",
            ["stage_name"],
        )

    def add_source(self, source: Source) -> None:
        """Add a source to pipeline. Also sets .pipeline reference to this pipeline on the source and all downstream stages.

        Args:
            source (Source): Source to add.
        """
        self._set_all_downstream_stage_pipeline_refs(source)
        self.sources.append(source)

    def add_error_handler(self, handler: BaseErrorHandler) -> None:
        """Add an error handler to the pipeline.

        Args:
            handler (BaseErrorHandler): a handler that will process all records 'SENT_TO_ERROR'.

        """
        self.error_handlers.append(handler)

    @staticmethod
    def _validate(func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator to make it easy to add validation before running a function."""

        @functools.wraps(func)
        def inner_func(self, *args, **kwargs):
            self.validate_pipeline()
            return func(self, *args, **kwargs)

        return inner_func

    def validate_pipeline(self) -> None:
        """Validates a pipeline and raises an error if it does not pass.

        Currently we check for the following things when validating:
        * cycles in the graph.
        * stages which are not sinks and have no downstreams
        * reduce stages directly fed by a source (nothing assigns partition keys)

        """
        if self._validated is True:
            self.log.debug(
                f"Pipeline ({self.name}) is in a validated state. Skipping validation."
            )
            return

        self.log.debug(f"Validating Pipeline {self.name}")

        self._validate_no_cycles()
        self._validate_no_dangling_stages()
        self._validate_reducers_follow_a_map()

        # once all check have run we set validated to true.
        self._validated = True

    def _validate_no_cycles(self) -> None:
        """Raise an error if there is a cycle in the pipeline graph."""
        graph = self.generate_pipeline_graph()
        if not nx.is_directed_acyclic_graph(graph):
            raise PipelineValidationError("A cycle was detected in this pipeline.")

    def _validate_no_dangling_stages(self) -> None:
        """Raise an error if a non-sink stage has no downstreams."""
        for stage in self._walk():
            if not stage.get_downstreams() and not isinstance(stage, Sink):
                raise PipelineValidationError(
                    f"Stage {stage.name} is not a sink and does not have any downstream stages."
                )

    def _validate_reducers_follow_a_map(self) -> None:
        for source in self.sources:
            for downstream in source.get_downstreams():
                if isinstance(downstream, ReduceStage):
                    raise PipelineValidationError(
                        f"Reduce stage {downstream.name} is fed directly by source {source.name}; add a map stage in between."
                    )

    def _walk(self) -> list[Stage]:
        stage_queue: list[Stage] = list(self.sources)
        seen: list[Stage] = []
        while stage_queue:
            cur_stage = stage_queue.pop(0)
            if cur_stage in seen:
                continue
            seen.append(cur_stage)
            stage_queue.extend(cur_stage.get_downstreams())
        return seen

    def generate_pipeline_graph(self) -> DiGraph:
        graph = DiGraph()
        stage_queue: list[Stage] = list(self.sources)
        added_stages = set()
        while stage_queue:
            current_stage = stage_queue.pop(0)
            if current_stage.unique_name not in graph.nodes:
                graph.add_node(current_stage.unique_name)
                added_stages.add(current_stage)
            for downstream in current_stage.get_downstreams():
                if downstream not in added_stages:
                    stage_queue.append(downstream)
                    graph.add_node(downstream.unique_name)
                    added_stages.add(downstream)
                graph.add_edge(current_stage.unique_name, downstream.unique_name)
        return graph

    @_validate
    def run(self) -> None:
        """Run the pipeline once. Every source is entered, read and its batch pushed downstream."""
        __start = time.time()
        for source in self.sources:
            with source:
                self._single_run(source, Batch())
        __end = time.time()
        self.log.info(f"Pipeline {self.name} finished in {__end - __start:.2f}s")
        if self.expose_metrics:  # pragma: no cover
            self.runs_processed.labels(pipeline_name=self.name).inc()
            self.pipeline_processing_time.labels(pipeline_name=self.name).set(
                __end - __start
            )

    @_validate
    def _single_run(self, stage: Stage, batch: Batch) -> None:
        batch = stage(batch)

        valid_batch, errored_batch = self._filter_errored_records(batch=batch)

        self._process_errored_records(batch=errored_batch)

        self._process_valid_records(stage=stage, batch=valid_batch)

    @staticmethod
    def _filter_errored_records(batch: Batch) -> tuple[Batch, Batch]:
        """Filter out errored records from valid records.

        Args:
            batch (Batch): Batch to be filtered.

        Returns:
            valid_batch (Batch): Batch with the good records.
            errored_batch (Batch): Batch with the errored records.
        """
        errored_batch = Batch()
        valid_batch = Batch()
        for record in batch.records:
            if record.error_count == 0:
                valid_batch.records.append(record)
            else:
                errored_batch.records.append(record)
        return valid_batch, errored_batch

    def _process_errored_records(self, batch: Batch) -> None:
        """Either send errored records to handlers or stop pipeline."""
        for record in batch.records:
            if record.error_handling_method != ErrorHandlingMethod.SEND_TO_ERROR:
                self.log.error(f"Stop pipeline error on record {record}")
                raise record.exceptions[-1]
            for handler in self.error_handlers:
                handler.process_error_record(record)

    def _process_valid_records(self, stage: Stage, batch: Batch) -> None:
        """Send non-errored records to every downstream stage."""
        downstreams = stage.get_downstreams()
        num_downstreams = len(downstreams)
        for downstream_stage in downstreams:
            if num_downstreams == 1:
                self._single_run(stage=downstream_stage, batch=batch)
            else:
                self._single_run(stage=downstream_stage, batch=deepcopy(batch))

    @_validate
    def __str__(self) -> str:
        sources = "\n".join([str(source) for source in self.sources])
        return f"{self.__class__.__name__} ({self.name}) \n {sources}"

    def _set_all_downstream_stage_pipeline_refs(self, source: Source) -> None:
        stack: list[Stage] = [source]
        added_stages = set()  # added to avoid an infinite loop when a cycle exists.
        while stack:
            cur_stage = stack.pop()
            cur_stage._set_pipeline(self)
            added_stages.add(cur_stage)
            stack.extend([x for x in cur_stage.downstreams if x not in added_stages])


class PipelineValidationError(BaseException):
    pass
