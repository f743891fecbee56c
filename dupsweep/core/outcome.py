from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .candidate import CandidateRecord, ParentId, RecordId


class OutcomeKind(Enum):
    """Result of a single deletion attempt."""

    SUCCESS = "success-delete"
    ERROR = "error-delete"
    PLANNED = "planned-delete"


@dataclass(frozen=True)
class DuplicateOutcome:
    """Emitted by the reduce stage once per deletion attempt (or planned deletion)."""

    kind: OutcomeKind
    parent_id: ParentId
    record_type: str
    id: RecordId
    cause: str | None = None

    @property
    def identity(self) -> str:
        return f"{self.parent_id}-{self.record_type}-{self.id}"

    @classmethod
    def for_candidate(
        cls, kind: OutcomeKind, candidate: CandidateRecord, cause: str | None = None
    ) -> DuplicateOutcome:
        return cls(
            kind=kind,
            parent_id=candidate.parent_id,
            record_type=candidate.record_type,
            id=candidate.id,
            cause=cause,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "parent_id": self.parent_id,
            "record_type": self.record_type,
            "id": self.id,
            "cause": self.cause,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DuplicateOutcome:
        return cls(
            kind=OutcomeKind(data["kind"]),
            parent_id=data["parent_id"],
            record_type=data["record_type"],
            id=data["id"],
            cause=data.get("cause"),
        )


@dataclass
class RunSummary:
    """Aggregate of all outcomes of a run. Lists hold composite identities in encounter order.

    Attributes:
        successes (list[str]): Deleted duplicates.
        errors (list[str]): Duplicates whose deletion failed.
        planned (list[str]): Duplicates that would be deleted (preview runs only).
        complete (bool): False when aggregation stopped early on a read error.
    """

    successes: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    planned: list[str] = field(default_factory=list)
    complete: bool = True

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def planned_count(self) -> int:
        return len(self.planned)

    @property
    def total(self) -> int:
        return self.success_count + self.error_count + self.planned_count

    def add(self, outcome: DuplicateOutcome) -> None:
        if outcome.kind == OutcomeKind.SUCCESS:
            self.successes.append(outcome.identity)
        elif outcome.kind == OutcomeKind.ERROR:
            self.errors.append(outcome.identity)
        elif outcome.kind == OutcomeKind.PLANNED:
            self.planned.append(outcome.identity)

    def as_dict(self) -> dict[str, Any]:
        return {
            "success_count": self.success_count,
            "error_count": self.error_count,
            "planned_count": self.planned_count,
            "successes": list(self.successes),
            "errors": list(self.errors),
            "planned": list(self.planned),
            "complete": self.complete,
        }
