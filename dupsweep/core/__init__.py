from .batch import Batch
from .candidate import CandidateRecord, ParentId, RecordId
from .error_handler import BaseErrorHandler, ErrorHandlerFailureAction
from .exceptions import (
    BatchError,
    ErrorHandlingMethod,
    PartitionError,
    RecordError,
    RecordStoreError,
    SinkError,
    SourceError,
    StageError,
)
from .outcome import DuplicateOutcome, OutcomeKind, RunSummary
from .pipeline import Pipeline, PipelineValidationError
from .record import Record, RecordData
from .record_store import DEFAULT_PAGE_SIZE, RecordStore, SearchPage
from .reduce import ReduceContext, ReduceStage
from .sink import Sink
from .source import Source
from .stage import Stage

__all__ = [
    "Batch",
    "BatchError",
    "BaseErrorHandler",
    "CandidateRecord",
    "DEFAULT_PAGE_SIZE",
    "DuplicateOutcome",
    "ErrorHandlerFailureAction",
    "ErrorHandlingMethod",
    "OutcomeKind",
    "ParentId",
    "PartitionError",
    "Pipeline",
    "PipelineValidationError",
    "Record",
    "RecordData",
    "RecordError",
    "RecordId",
    "RecordStore",
    "RecordStoreError",
    "ReduceContext",
    "ReduceStage",
    "RunSummary",
    "SearchPage",
    "Sink",
    "SinkError",
    "Source",
    "SourceError",
    "Stage",
    "StageError",
]
