from __future__ import annotations

import multiprocessing
import time
from typing import TYPE_CHECKING, Sequence

from dupsweep.core.batch import Batch
from dupsweep.core.exceptions import BatchError, ErrorHandlingMethod, RecordError
from dupsweep.core.record import Record
from dupsweep.utils.log import LoggingMixin

if TYPE_CHECKING:
    from dupsweep.core import Pipeline


class Stage(LoggingMixin):
    """Core `Stage` base class. Subclasses should implement the following .process_record or .process_batch methods."""

    __next_id = 1

    @classmethod
    def _next_id(cls) -> int:
        nxt = cls.__next_id
        cls.__next_id += 1
        return nxt

    def __init__(
        self,
        name: str | None = None,
        processes: int = 1,
        error_handling_method: ErrorHandlingMethod = ErrorHandlingMethod.DEFAULT,
        expose_metrics: bool = False,
    ) -> None:
        """
        Initialize the `Stage`. **This is a private method for subclass use. Subclasses should copy-paste this `__init__` documentation.**

        Args:
            name (str, optional): Stage name. Defaults to class name if name = None.
            processes (int, optional): Number of CPUs to use. Can only be used if .process_record method is implemented. Defaults to 1.
            error_handling_method (ErrorHandlingMethod, optional): Enum that represents how the stage would like the pipeline to handle errors which occur when running this stage. By default, errored records are sent to the pipeline's error handlers.
            expose_metrics (bool, optional): Whether to expose metrics for this stage. Defaults to False.

        Raises:
            ValueError: Raised if processes > 1 and .process_record method is not implemented.
        """
        self.id = self._next_id()
        self._pipeline: Pipeline | None = None

        if name is None:
            name = self.__class__.__name__
        self.name = name
        self.error_handling_method = error_handling_method
        self.downstreams: list[Stage] = []
        if processes < 1:
            raise ValueError("processes must be greater than 0")
        if processes > 1 and not self._supports_parallelism():
            raise ValueError(
                "Can only automatically use multiprocessing when .process_record method is implemented."
            )
        self.processes = processes
        self.expose_metrics = expose_metrics

    def _supports_parallelism(self) -> bool:
        return hasattr(self, "process_record")

    @property
    def unique_name(self) -> str:
        """Unique identifier for this stage. Combines stage name, stage id, pipeline name, and pipeline id."""
        return (
            self.name
            + "_"
            + str(self.id)
            + "_"
            + str(self.pipeline.name)
            + "_"
            + str(self.pipeline.id)
        )

    @property
    def pipeline(self) -> "Pipeline":
        """The pipeline to which this stage belongs."""
        if self._pipeline is None:
            raise ValueError("This stage is not part of a pipeline.")
        return self._pipeline

    def _set_pipeline(self, pipeline: "Pipeline") -> None:
        self._pipeline = pipeline
        pipeline._validated = False

    @property
    def _metrics_enabled(self) -> bool:
        if not self.expose_metrics:
            return False
        if self._pipeline is not None and self._pipeline.expose_metrics:
            return True
        self.log.warning(
            "Pipeline metrics are set to False, but stage metrics are set to True. Stage metrics will not be exposed."
        )
        return False

    def __call__(self, batch: Batch) -> Batch:
        """Process a batch of data.

        Args:
            batch (Batch): Batch of data to process.

        Raises:
            NotImplementedError: Raised if neither .process_record and .process_batch methods are not implemented.

        Returns:
            Batch: Processed version of input batch.
        """
        self.log.info(
            f"Processing batch with {self.__class__.__name__} stage: {self.name}"
        )
        self.log.record(batch)  # type: ignore
        __start = time.time()
        if hasattr(self, "process_record"):
            if self.processes == 1:
                batch.records = [
                    self._process_record(record) for record in batch.records
                ]
            else:
                with multiprocessing.Pool(processes=self.processes) as pool:
                    batch.records = pool.map(self._process_record, batch.records)
        elif hasattr(self, "process_batch"):
            batch = self._process_batch(batch)
        else:
            raise NotImplementedError(
                "Stage {} has neither process_record nor process_batch methods.".format(
                    self.name
                )
            )
        __end = time.time()
        self._observe(batch, __end - __start)
        return batch

    def _observe(self, batch: Batch, elapsed: float) -> None:
        if self._metrics_enabled:  # pragma: no cover
            self.pipeline.records_processed.labels(
                pipeline_name=self.pipeline.name, stage_name=self.name
            ).inc(len(batch.records))
            self.pipeline.stage_processing_time.labels(stage_name=self.name).set(
                elapsed
            )

    def _count_errors(self, amount: int) -> None:
        if self._metrics_enabled:  # pragma: no cover
            self.pipeline.records_errored.labels(
                pipeline_name=self.pipeline.name, stage_name=self.name
            ).inc(amount)

    def _process_batch(self, batch: Batch) -> Batch:
        try:
            batch = self.process_batch(batch)  # type: ignore
        except Exception as e:
            self._count_errors(len(batch.records))
            if self.error_handling_method == ErrorHandlingMethod.RAISE:
                raise e
            for record in batch.records:
                batch_error = BatchError(
                    stage_name=self.name,
                    message=f"Stage {self.name} encountered an error affecting the entire batch.",
                    handling_method=self.error_handling_method,
                )
                batch_error.__cause__ = e
                record.add_exception(batch_error)

        return batch

    def _process_record(self, record: Record) -> Record:
        try:
            record = self.process_record(record)  # type: ignore
        except Exception as e:
            self._count_errors(1)
            if self.error_handling_method == ErrorHandlingMethod.RAISE:
                raise e
            new_exception = RecordError(
                stage_name=self.name,
                message=f"Stage {self.name} encountered an error when processing this record.",
                handling_method=self.error_handling_method,
            )
            new_exception.__cause__ = e
            record.add_exception(new_exception)
        return record

    def add_downstream(self, other: Stage | Sequence[Stage]):
        """Adds a stage/s downstream of this stage.

        Args:
            other (Stage | Sequence[Stage]): This is what is being added downstream. In the case of a list we recursively call this function.

        """
        if isinstance(other, Stage):
            self.downstreams.append(other)
            if self._pipeline is not None:
                other._set_pipeline(self._pipeline)
        elif isinstance(other, Sequence):
            for downstream in other:
                self.add_downstream(downstream)
        else:
            raise ValueError(f"Invalid downstream(s): {other}")

    def add_upstream(self, other: Stage | Sequence[Stage]):
        """Add this stage to the downstreams of other stages.

        Args:
            other (Stage | Sequence[Stage]): the upstream stage/s to add this stage to.
        """
        if isinstance(other, Stage):
            other.add_downstream(self)
        elif isinstance(other, Sequence):
            for upstream in other:
                upstream.add_downstream(self)
        else:
            raise ValueError(f"Invalid upstream(s): {other}")

    def get_downstreams(self) -> list[Stage]:
        """Get all downstream stages."""
        return self.downstreams

    def __str__(self):
        """Implements __str__ for Stage."""

        def construct_name(stage: Stage) -> str:
            return f"{stage.name} ({stage.__class__.__name__} {stage.id})"

        def indented_dfs(stage: Stage, indent: int = 0) -> str:
            inner = "".join(
                indented_dfs(downstream, indent + 4) for downstream in stage.downstreams
            )
            return f"{' ' * indent} -> {construct_name(stage)}\n{inner}"

        return indented_dfs(self)

    def __lshift__(self, other: Stage | Sequence[Stage]):
        """Implements Stage << Stage"""
        self.add_upstream(other)
        return other

    def __rshift__(self, other: Stage | Sequence[Stage]):
        """Implements Stage >> Stage"""
        self.add_downstream(other)
        return other

    def __rrshift__(self, other: Stage | Sequence[Stage]):
        """Called for [Stage] >> Stage because list does not have __rshift__ operators."""
        self.__lshift__(other)
        return self

    def __rlshift__(self, other: Stage | Sequence[Stage]):
        """Called for [Stage] << Stage because list does not have __lshift__ operators."""
        self.__rshift__(other)
        return self
