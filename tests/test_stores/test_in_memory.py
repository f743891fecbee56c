import pickle
from multiprocessing.pool import ThreadPool

import pytest

from dupsweep.core import CandidateRecord, RecordStoreError
from dupsweep.stores import InMemoryRecordStore
from tests.helpers import candidate_row


def test_search_orders_by_transaction_number():
    store = InMemoryRecordStore(
        rows=[
            candidate_row(3, "itemreceipt", "RA-1"),
            candidate_row(1, "itemreceipt", "RA-1"),
            candidate_row(2, "cashrefund", "RA-1"),
        ]
    )
    pages = list(store.search(["RA-1"], "RtnAuth"))
    assert [[row["id"] for row in page] for page in pages] == [[1, 2, 3]]


def test_search_pages():
    store = InMemoryRecordStore(
        rows=[candidate_row(i, "itemreceipt", "RA-1") for i in range(5)]
    )
    pages = list(store.search(["RA-1"], "RtnAuth", page_size=2))
    assert [len(page) for page in pages] == [2, 2, 1]


def test_search_with_no_matches_yields_no_pages():
    store = InMemoryRecordStore(rows=[candidate_row(1, "itemreceipt", "RA-1")])
    assert list(store.search(["RA-404"], "RtnAuth")) == []


def test_search_fails_after_configured_pages():
    store = InMemoryRecordStore(
        rows=[candidate_row(i, "itemreceipt", "RA-1") for i in range(3)],
        search_error=TimeoutError("slow"),
        fail_after_pages=1,
    )
    pages = store.search(["RA-1"], "RtnAuth", page_size=2)
    assert len(next(pages)) == 2
    with pytest.raises(TimeoutError):
        next(pages)


def test_rows_may_be_candidates():
    candidate = CandidateRecord.from_dict(candidate_row(1, "itemreceipt", "RA-1"))
    store = InMemoryRecordStore(rows=[candidate])
    assert list(store.search(["RA-1"], "RtnAuth")) == [[candidate.as_dict()]]


def test_delete_removes_row_and_matches_id_loosely():
    store = InMemoryRecordStore(rows=[candidate_row(7, "itemreceipt", "RA-1")])
    store.delete("itemreceipt", "7")
    assert store.rows == []
    assert store.deleted == [("itemreceipt", "7")]


def test_delete_checks_record_type():
    store = InMemoryRecordStore(rows=[candidate_row(7, "itemreceipt", "RA-1")])
    with pytest.raises(RecordStoreError):
        store.delete("cashrefund", 7)
    assert len(store.rows) == 1


def test_rejected_delete_leaves_row():
    store = InMemoryRecordStore(
        rows=[candidate_row(7, "itemreceipt", "RA-1")],
        failing_deletes=[("itemreceipt", 7)],
    )
    with pytest.raises(RecordStoreError, match="rejected"):
        store.delete("itemreceipt", 7)
    assert len(store.rows) == 1


def test_concurrent_deletes_remove_the_right_rows():
    store = InMemoryRecordStore(
        rows=[candidate_row(i, "itemreceipt", f"RA-{i % 4}") for i in range(200)]
    )
    doomed = list(range(1, 200, 2))
    with ThreadPool(processes=8) as pool:
        pool.map(lambda id_: store.delete("itemreceipt", id_), doomed)
    assert sorted(row["id"] for row in store.rows) == list(range(0, 200, 2))
    assert sorted(record_id for _, record_id in store.deleted) == doomed


def test_store_survives_pickling():
    store = InMemoryRecordStore(rows=[candidate_row(7, "itemreceipt", "RA-1")])
    copy = pickle.loads(pickle.dumps(store))
    copy.delete("itemreceipt", 7)
    assert copy.rows == []
    assert len(store.rows) == 1
