from __future__ import annotations

import abc
import time
from dataclasses import dataclass, field
from multiprocessing.pool import ThreadPool
from typing import Any

from dupsweep.core.batch import Batch
from dupsweep.core.exceptions import ErrorHandlingMethod, PartitionError, RecordError
from dupsweep.core.record import Record
from dupsweep.core.stage import Stage


@dataclass
class ReduceContext:
    """Everything a single reduce invocation may see or touch.

    Attributes:
        key (str): The partition key.
        values (Batch): Records of the partition, in emission order.
        output (Batch): Records written by the invocation.
    """

    key: str
    values: Batch
    output: Batch = field(default_factory=Batch)

    def write(self, key: str, data: dict[str, Any]) -> None:
        """Emit one output record tagged with `key`."""
        self.output.records.append(
            Record(data=data, key=key, sequence=len(self.output.records))
        )


class ReduceStage(Stage, metaclass=abc.ABCMeta):
    """Stage that groups its input by `Record.key` and reduces each group independently.

    Partitions never share state. With `processes > 1` partitions are reduced on a
    thread pool; the output batch is still assembled in partition order.
    """

    def __init__(
        self,
        name: str | None = None,
        processes: int = 1,
        error_handling_method: ErrorHandlingMethod = ErrorHandlingMethod.DEFAULT,
        expose_metrics: bool = False,
    ) -> None:
        """Initialize the `ReduceStage`. **This is a private method for subclass use. Subclasses should copy-paste this `__init__` documentation.**

        Args:
            name (str, optional): Stage name. Defaults to class name if name = None.
            processes (int, optional): Number of partitions reduced concurrently. Defaults to 1.
            error_handling_method (ErrorHandlingMethod, optional): Enum that represents how the stage would like the pipeline to handle errors which occur when running this stage. By default, a failed partition is sent to the pipeline's error handlers.
            expose_metrics (bool, optional): Whether or not to expose metrics for this stage. Defaults to False.
        """
        Stage.__init__(
            self,
            name=name,
            processes=processes,
            error_handling_method=error_handling_method,
            expose_metrics=expose_metrics,
        )

    def _supports_parallelism(self) -> bool:
        return True

    @abc.abstractmethod
    def process_partition(self, context: ReduceContext) -> None:
        """Reduce one partition, emitting output through `context.write`."""
        pass

    def __call__(self, batch: Batch) -> Batch:
        self.log.info(
            f"Processing batch with {self.__class__.__name__} stage: {self.name}"
        )
        self.log.record(batch)  # type: ignore
        __start = time.time()

        keyed = Batch()
        unkeyed: list[Record] = []
        for record in batch.records:
            if record.key is None:
                unkeyed.append(self._reject_unkeyed(record))
            else:
                keyed.records.append(record)

        partitions = list(keyed.partition().items())
        self.log.debug(f"{self.name}: reducing {len(partitions)} partitions")
        if self.processes == 1 or len(partitions) <= 1:
            results = [self._process_partition(key, values) for key, values in partitions]
        else:
            with ThreadPool(processes=self.processes) as pool:
                results = pool.starmap(self._process_partition, partitions)

        output = Batch(records=unkeyed)
        for records in results:
            output.records.extend(records)

        __end = time.time()
        self._observe(output, __end - __start)
        return output

    def _reject_unkeyed(self, record: Record) -> Record:
        self._count_errors(1)
        error = RecordError(
            stage_name=self.name,
            message=f"Stage {self.name} received a record without a partition key.",
            handling_method=self.error_handling_method,
        )
        if self.error_handling_method == ErrorHandlingMethod.RAISE:
            raise error
        record.add_exception(error)
        return record

    def _process_partition(self, key: str, values: Batch) -> list[Record]:
        context = ReduceContext(key=key, values=values)
        try:
            self.process_partition(context)
        except Exception as e:
            self._count_errors(1)
            if self.error_handling_method == ErrorHandlingMethod.RAISE:
                raise e
            self.log.error(f"{self.name}: error processing partition {key}: {e!r}")
            partition_error = PartitionError(
                stage_name=self.name,
                message=f"Stage {self.name} abandoned partition {key}.",
                handling_method=self.error_handling_method,
                partition_key=key,
            )
            partition_error.__cause__ = e
            error_record = Record(
                data={"partition_key": key, "values": values.data_as_list()}, key=key
            )
            error_record.add_exception(partition_error)
            return context.output.records + [error_record]
        return context.output.records
