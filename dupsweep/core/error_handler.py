import abc
from enum import Enum

from dupsweep.core.record import Record


class ErrorHandlerFailureAction(Enum):
    """What a handler does when it cannot report an errored record itself."""

    RAISE = "RAISE"
    LOG = "LOG"
    IGNORE = "IGNORE"


class BaseErrorHandler(abc.ABC):
    """Receives every record a stage marked `SEND_TO_ERROR`.

    These are candidates dropped by the partitioner, partitions abandoned by
    the resolver (`PartitionError` records carrying the partition key and its
    values) and records rejected for lacking a partition key.
    """

    def __init__(
        self,
        failure_action: ErrorHandlerFailureAction = ErrorHandlerFailureAction.RAISE,
    ) -> None:
        super().__init__()
        # None means the default
        self.failure_action = failure_action or ErrorHandlerFailureAction.RAISE

    @abc.abstractmethod
    def process_error_record(self, record: Record) -> None:
        """Report one errored record. `record.exceptions[-1]` is the error that removed it from the run."""
        pass
