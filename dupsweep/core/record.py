from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4

from .exceptions import ErrorHandlingMethod, StageError

# Type aliases
FieldName = str
RecordData = dict[FieldName, Any]


@dataclass
class Record:
    """Container class for all record data and metadata.

    `key` is set by map stages and used by reduce stages to build partitions.
    `sequence` is the emission order assigned by the source.
    """

    data: RecordData = field(default_factory=dict)
    # Metadata
    key: str | None = None
    sequence: int = 0
    record_uuid: UUID = field(default_factory=uuid4)
    exceptions: list[StageError] = field(default_factory=list)

    def add_exception(self, error: StageError):
        """Attach an error to the record"""
        self.exceptions.append(error)

    @property
    def error_count(self) -> int:
        """The number of errors attached to the record."""
        return len(self.exceptions)

    @property
    def most_recent_error(self) -> StageError | None:
        """The most recently raised error attached to the record."""
        return self.exceptions[-1] if self.error_count > 0 else None

    @property
    def error_handling_method(self) -> ErrorHandlingMethod | None:
        """The error handling method of the most recent exception."""
        recent_error = self.most_recent_error
        return recent_error.handling_method if recent_error is not None else None

    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "data": self.data,
            "key": self.key,
            "sequence": self.sequence,
            "record_uuid": str(self.record_uuid),
            "exceptions": [x.as_dict() for x in self.exceptions],
        }
