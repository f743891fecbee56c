from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

# Type aliases
ParentId = str
RecordId = str | int

_REQUIRED_FIELDS = ("id", "record_type", "parent_id")


@dataclass(frozen=True)
class CandidateRecord:
    """Point-in-time snapshot of one descendant transaction eligible for the duplicate check.

    Attributes:
        id (str | int): Store-assigned identifier.
        transaction_number (str): Display identifier. Enumeration is ordered by this field.
        document_type (str): Free-form type tag reported by the store.
        record_type (str): Concrete subtype used for duplicate classification (e.g. "itemreceipt").
        transaction_date (str): Transaction date as reported by the store.
        date_created (str): Creation timestamp as reported by the store.
        parent_id (str): Identifier of the parent document the record was created from. Partition key.
        created_by (str): User that created the record.
    """

    id: RecordId
    record_type: str
    parent_id: ParentId
    transaction_number: str | None = None
    document_type: str | None = None
    transaction_date: str | None = None
    date_created: str | None = None
    created_by: str | None = None

    def __post_init__(self) -> None:
        if self.id is None or str(self.id).strip() == "":
            raise ValueError("Candidate record has no id.")
        if not self.record_type:
            raise ValueError(f"Candidate record {self.id} has no record_type.")
        if self.parent_id is None or str(self.parent_id).strip() == "":
            raise ValueError(
                f"Candidate record {self.id} has no parent_id and cannot be partitioned."
            )

    @property
    def identity(self) -> str:
        """Composite identity `{parent_id}-{record_type}-{id}` used in outcomes."""
        return f"{self.parent_id}-{self.record_type}-{self.id}"

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CandidateRecord:
        """Parse a serialized candidate.

        Raises:
            ValueError: If a required field is missing or blank.
            TypeError: If `data` is not a mapping.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected a dict payload, got {type(data).__name__}.")
        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            raise ValueError(f"Candidate payload is missing fields: {missing}")
        parent_id = data["parent_id"]
        return cls(
            id=data["id"],
            record_type=data["record_type"],
            parent_id=str(parent_id).strip() if parent_id is not None else parent_id,
            transaction_number=data.get("transaction_number"),
            document_type=data.get("document_type"),
            transaction_date=data.get("transaction_date"),
            date_created=data.get("date_created"),
            created_by=data.get("created_by"),
        )
