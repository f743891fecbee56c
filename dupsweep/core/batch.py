from __future__ import annotations

from dataclasses import dataclass, field
from pprint import pformat
from typing import Any

from dupsweep.core.record import Record


@dataclass
class Batch:
    """Batch of data. Contains records.

    Attributes:
        records (list[Record]): Records in the batch.
    """

    records: list[Record] = field(default_factory=list)

    def __repr__(self) -> str:
        start = "Batch("
        formatted_records = "\n\t".join([pformat(record) for record in self.records])
        return "".join([start, "\n\t", formatted_records, "\n)"])

    def __len__(self) -> int:
        return len(self.records)

    def data_as_list(self) -> list[dict[str, Any]]:
        """Creates list of record data

        Returns:
            list[dict[str, Any]]: Data from records in batch

        """
        return [record.data for record in self.records]

    def partition(self) -> dict[str, Batch]:
        """Groups records by `Record.key`.

        Partitions appear in the order their key was first seen. Inside a
        partition records are stably sorted by `Record.sequence`, so values
        keep the order in which the source emitted them regardless of how the
        map stage scheduled its work.

        Raises:
            ValueError: If a record has no key.

        Returns:
            dict[str, Batch]: One batch per key.
        """
        partitions: dict[str, list[Record]] = {}
        for record in self.records:
            if record.key is None:
                raise ValueError(f"Record {record.record_uuid} has no partition key.")
            partitions.setdefault(record.key, []).append(record)
        return {
            key: Batch(records=sorted(records, key=lambda r: r.sequence))
            for key, records in partitions.items()
        }
