from types import TracebackType
from typing import Any, Type

from dupsweep.core import Batch, Record, Sink, Source


def candidate_row(
    id_: int | str, record_type: str, parent_id: str | None, **extra: Any
) -> dict[str, Any]:
    row = {
        "id": id_,
        "transaction_number": f"TXN-{str(id_).zfill(6)}",
        "document_type": record_type,
        "record_type": record_type,
        "transaction_date": "2024-01-02",
        "date_created": "2024-01-02T10:00:00Z",
        "parent_id": parent_id,
        "created_by": "jdoe",
    }
    row.update(extra)
    return row


def dicts_from_batch(batch: Batch) -> list[dict]:
    return [dict(record.data) for record in batch.records]


def batch_from_dicts(rec_dicts: list[dict], key: str | None = None) -> Batch:
    return Batch(
        records=[
            Record(data=rd, key=key, sequence=sequence)
            for sequence, rd in enumerate(rec_dicts)
        ]
    )


class StaticSource(Source):
    """Emits copies of a fixed list of payloads."""

    def __init__(self, rows: list[dict] | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.rows = rows if rows is not None else [{"a": 1}]
        self.entered = 0
        self.exited = 0

    def process_batch(self, batch: Batch) -> Batch:
        return batch_from_dicts([dict(row) for row in self.rows])

    def __enter__(self) -> None:
        self.entered += 1

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        self.exited += 1
        return False


class CollectSink(Sink):
    """Keeps every batch it receives."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.batches: list[Batch] = []

    def process_batch(self, batch: Batch) -> Batch:
        self.batches.append(batch)
        return batch

    @property
    def records(self) -> list[Record]:
        return [record for batch in self.batches for record in batch.records]
