from typing import Any

from dupsweep.core import CandidateRecord, ErrorHandlingMethod, ParentId, Record, Stage


class PartitionStage(Stage):
    """Map stage. Keys every candidate by the parent document it was created from."""

    def __init__(
        self,
        name: str | None = None,
        processes: int = 1,
        error_handling_method: ErrorHandlingMethod = ErrorHandlingMethod.DEFAULT,
        expose_metrics: bool = False,
    ) -> None:
        """Initialize the `PartitionStage`.

        Args:
            name (str, optional): Stage name. Defaults to class name if name = None.
            processes (int, optional): Number of CPUs to use. Defaults to 1.
            error_handling_method (ErrorHandlingMethod, optional): Enum that represents how the stage would like the pipeline to handle errors which occur when running this stage. By default, malformed records are sent to the pipeline's error handlers and dropped.
            expose_metrics (bool, optional): Whether or not to expose metrics for this stage. Defaults to False.
        """
        Stage.__init__(
            self,
            name=name,
            processes=processes,
            error_handling_method=error_handling_method,
            expose_metrics=expose_metrics,
        )

    @staticmethod
    def partition(data: dict[str, Any]) -> tuple[ParentId, dict[str, Any]]:
        """Map a serialized candidate to `(parent_id, payload)`.

        Raises:
            ValueError: If the payload is missing required fields or has no parent.
            TypeError: If the payload is not a dict.
        """
        candidate = CandidateRecord.from_dict(data)
        return candidate.parent_id, candidate.as_dict()

    def process_record(self, record: Record) -> Record:
        record.key, record.data = self.partition(record.data)
        return record
