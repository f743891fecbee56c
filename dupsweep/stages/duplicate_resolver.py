from collections import Counter
from typing import Iterable, Iterator, Mapping

from dupsweep.config import RunMode, config_state
from dupsweep.core import (
    CandidateRecord,
    DuplicateOutcome,
    ErrorHandlingMethod,
    OutcomeKind,
    ParentId,
    RecordStore,
    ReduceContext,
    ReduceStage,
)

# record type -> label used in log lines
DEFAULT_TRACKED_TYPES = {"itemreceipt": "IRS", "cashrefund": "CRS"}


class DuplicateCounter:
    """Per-partition tally of documents presumed to still exist, by record type.

    Every record type is tallied; only tracked types can be flagged as excess.
    """

    def __init__(self, tracked_types: Mapping[str, str], allowed: int = 1) -> None:
        self.tracked_types = tracked_types
        self.allowed = allowed
        self.counts: Counter[str] = Counter()

    def observe(self, record_type: str) -> bool:
        """Count one record. Returns True when it is an excess duplicate."""
        self.counts[record_type] += 1
        return (
            record_type in self.tracked_types
            and self.counts[record_type] > self.allowed
        )

    def release(self, record_type: str) -> None:
        """Forget one record of `record_type` after it was deleted."""
        self.counts[record_type] -= 1


def iter_excess_duplicates(
    candidates: Iterable[CandidateRecord],
    tracked_types: Mapping[str, str] = DEFAULT_TRACKED_TYPES,
    allowed: int = 1,
) -> Iterator[CandidateRecord]:
    """Yield each excess duplicate as soon as it is seen, assuming every deletion succeeds."""
    counter = DuplicateCounter(tracked_types, allowed)
    for candidate in candidates:
        if counter.observe(candidate.record_type):
            counter.release(candidate.record_type)
            yield candidate


def find_excess_duplicates(
    candidates: Iterable[CandidateRecord],
    tracked_types: Mapping[str, str] = DEFAULT_TRACKED_TYPES,
    allowed: int = 1,
) -> list[CandidateRecord]:
    """Candidates that would be deleted from one partition, assuming every deletion succeeds.

    The first `allowed` instances of each tracked type survive; later ones are excess.
    """
    return list(iter_excess_duplicates(candidates, tracked_types, allowed))


class DuplicateResolverStage(ReduceStage):
    """Reduce stage. Deletes excess instances of the tracked record types within each parent.

    Counters live for one partition only and track documents known or assumed
    to still exist: a successful delete releases the count, a failed delete
    does not, so later records of the same type are still flagged. Decisions
    use the enumeration snapshot only; the store is not re-queried before a
    delete. In `RunMode.PREVIEW` nothing is deleted and planned deletions are
    emitted instead.
    """

    def __init__(
        self,
        store: RecordStore,
        tracked_types: Mapping[str, str] | None = None,
        allowed_count: int = 1,
        name: str | None = None,
        processes: int = 1,
        error_handling_method: ErrorHandlingMethod = ErrorHandlingMethod.DEFAULT,
        expose_metrics: bool = False,
    ) -> None:
        """Initialize the `DuplicateResolverStage`.

        Args:
            store (RecordStore): Store that duplicates are deleted from.
            tracked_types (Mapping[str, str], optional): Record types subject to the duplicate rule, mapped to a label for log lines. Defaults to item receipts (IRS) and cash refunds (CRS).
            allowed_count (int, optional): Instances of each tracked type kept per parent. Defaults to 1.
            name (str, optional): Stage name. Defaults to class name if name = None.
            processes (int, optional): Number of partitions resolved concurrently. Defaults to 1.
            error_handling_method (ErrorHandlingMethod, optional): Enum that represents how the stage would like the pipeline to handle errors which occur when running this stage. By default, a failed partition is sent to the pipeline's error handlers.
            expose_metrics (bool, optional): Whether or not to expose metrics for this stage. Defaults to False.
        """
        ReduceStage.__init__(
            self,
            name=name,
            processes=processes,
            error_handling_method=error_handling_method,
            expose_metrics=expose_metrics,
        )
        if allowed_count < 1:
            raise ValueError("allowed_count must be greater than 0")
        self.store = store
        self.tracked_types = dict(
            DEFAULT_TRACKED_TYPES if tracked_types is None else tracked_types
        )
        if not self.tracked_types:
            raise ValueError("tracked_types must name at least one record type")
        self.allowed_count = allowed_count

    def process_partition(self, context: ReduceContext) -> None:
        self.log.debug(
            f"{self.name}: processing duplicate records for parent {context.key}"
        )
        self.log.record(context.values)  # type: ignore
        candidates = (
            CandidateRecord.from_dict(record.data) for record in context.values.records
        )
        for outcome in self.resolve(context.key, candidates):
            self._count_outcome(outcome)
            context.write(outcome.kind.value, outcome.as_dict())

    def resolve(
        self, parent_id: ParentId, candidates: Iterable[CandidateRecord]
    ) -> Iterator[DuplicateOutcome]:
        """Resolve the duplicates of one parent. Yields an outcome right after each deletion attempt."""
        if config_state.RUN_MODE == RunMode.PREVIEW:
            yield from self._plan(parent_id, candidates)
            return

        counter = DuplicateCounter(self.tracked_types, self.allowed_count)
        for candidate in candidates:
            if not counter.observe(candidate.record_type):
                continue
            label = self.tracked_types[candidate.record_type]
            self.log.debug(f"{self.name}: deleting duplicate {label} {candidate}")
            try:
                self.store.delete(candidate.record_type, candidate.id)
            except Exception as e:
                self.log.error(
                    f"{self.name}: error deleting duplicate {label} with ID {candidate.identity}: {e}"
                )
                yield DuplicateOutcome.for_candidate(
                    OutcomeKind.ERROR, candidate, cause=str(e)
                )
                continue
            counter.release(candidate.record_type)
            self.log.debug(
                f"{self.name}: deleted duplicate {label} with ID {candidate.identity}"
            )
            yield DuplicateOutcome.for_candidate(OutcomeKind.SUCCESS, candidate)

    def _plan(
        self, parent_id: ParentId, candidates: Iterable[CandidateRecord]
    ) -> Iterator[DuplicateOutcome]:
        for candidate in iter_excess_duplicates(
            candidates, self.tracked_types, self.allowed_count
        ):
            label = self.tracked_types[candidate.record_type]
            self.log.info(
                f"{self.name}: preview, would delete duplicate {label} with ID {candidate.identity}"
            )
            yield DuplicateOutcome.for_candidate(OutcomeKind.PLANNED, candidate)

    def _count_outcome(self, outcome: DuplicateOutcome) -> None:
        if self._metrics_enabled:  # pragma: no cover
            self.pipeline.deletions.labels(
                pipeline_name=self.pipeline.name, outcome=outcome.kind.value
            ).inc()
