import threading
from typing import Any, Iterable, Iterator, Sequence

from dupsweep.core import (
    DEFAULT_PAGE_SIZE,
    CandidateRecord,
    ParentId,
    RecordId,
    RecordStore,
    RecordStoreError,
    SearchPage,
)


class InMemoryRecordStore(RecordStore):
    """Dict-backed record store. Used for tests and local dry runs.

    Rows are dicts keyed by `CandidateRecord` field names. Two optional keys
    control filtering: `parent_kind` (defaults to matching any kind) and
    `main_line` (defaults to True).
    """

    def __init__(
        self,
        rows: Iterable[dict[str, Any] | CandidateRecord] = (),
        failing_deletes: Iterable[tuple[str, RecordId]] = (),
        search_error: Exception | None = None,
        fail_after_pages: int = 0,
    ) -> None:
        """Initialize the `InMemoryRecordStore`.

        Args:
            rows (Iterable[dict | CandidateRecord], optional): Initial rows.
            failing_deletes (Iterable[tuple[str, str | int]], optional): `(record_type, id)` pairs whose delete is rejected.
            search_error (Exception, optional): Raised while paging through `search` results when set.
            fail_after_pages (int, optional): Pages yielded before `search_error` is raised. Defaults to 0.
        """
        self.rows: list[dict[str, Any]] = []
        for row in rows:
            self.add(row)
        self.failing_deletes = {(rt, str(rid)) for rt, rid in failing_deletes}
        self.search_error = search_error
        self.fail_after_pages = fail_after_pages
        self.searches: list[tuple[list[ParentId], str, int]] = []
        self.deleted: list[tuple[str, RecordId]] = []
        self._lock = threading.Lock()

    def __getstate__(self) -> dict[str, Any]:
        state = self.__dict__.copy()
        del state["_lock"]
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._lock = threading.Lock()

    def add(self, row: dict[str, Any] | CandidateRecord) -> None:
        if isinstance(row, CandidateRecord):
            row = row.as_dict()
        self.rows.append(dict(row))

    def search(
        self,
        parent_ids: Sequence[ParentId],
        parent_kind: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Iterator[SearchPage]:
        if page_size < 1:
            raise ValueError("page_size must be greater than 0")
        self.searches.append((list(parent_ids), parent_kind, page_size))
        wanted = {str(parent_id) for parent_id in parent_ids}
        matches = [
            {k: v for k, v in row.items() if k not in ("parent_kind", "main_line")}
            for row in self.rows
            if str(row.get("parent_id")) in wanted
            and row.get("parent_kind", parent_kind) == parent_kind
            and row.get("main_line", True)
        ]
        matches.sort(key=lambda row: str(row.get("transaction_number") or ""))
        pages = [
            matches[index : index + page_size]
            for index in range(0, len(matches), page_size)
        ]
        for page_number, page in enumerate(pages + [[]]):
            if self.search_error is not None and page_number == self.fail_after_pages:
                raise self.search_error
            if page:
                yield page

    def delete(self, record_type: str, record_id: RecordId) -> None:
        if (record_type, str(record_id)) in self.failing_deletes:
            raise RecordStoreError(f"Delete of {record_type} {record_id} was rejected.")
        # reduce partitions may delete concurrently
        with self._lock:
            for index, row in enumerate(self.rows):
                if row.get("record_type") == record_type and str(row.get("id")) == str(
                    record_id
                ):
                    del self.rows[index]
                    self.deleted.append((record_type, record_id))
                    self.log.debug(
                        f"InMemoryRecordStore: deleted {record_type} {record_id}"
                    )
                    return
        raise RecordStoreError(f"Record {record_type} {record_id} does not exist.")
