import pytest

from dupsweep.core import Batch, Record


def test_data_as_list():
    batch = Batch(records=[Record(data={"a": 1}), Record(data={"a": 2})])
    assert batch.data_as_list() == [{"a": 1}, {"a": 2}]
    assert len(batch) == 2


def test_partition_groups_by_key_in_first_seen_order():
    batch = Batch(
        records=[
            Record(data={"id": 1}, key="RA-2", sequence=0),
            Record(data={"id": 2}, key="RA-1", sequence=1),
            Record(data={"id": 3}, key="RA-2", sequence=2),
        ]
    )
    partitions = batch.partition()
    assert list(partitions) == ["RA-2", "RA-1"]
    assert partitions["RA-2"].data_as_list() == [{"id": 1}, {"id": 3}]
    assert partitions["RA-1"].data_as_list() == [{"id": 2}]


def test_partition_restores_emission_order():
    # map output arriving out of order is put back in source order
    batch = Batch(
        records=[
            Record(data={"id": 13}, key="RA-1", sequence=3),
            Record(data={"id": 10}, key="RA-1", sequence=0),
            Record(data={"id": 12}, key="RA-1", sequence=2),
            Record(data={"id": 11}, key="RA-1", sequence=1),
        ]
    )
    partitions = batch.partition()
    assert [r.data["id"] for r in partitions["RA-1"].records] == [10, 11, 12, 13]


def test_partition_is_stable_for_equal_sequences():
    batch = Batch(
        records=[
            Record(data={"id": "b"}, key="k"),
            Record(data={"id": "a"}, key="k"),
        ]
    )
    assert batch.partition()["k"].data_as_list() == [{"id": "b"}, {"id": "a"}]


def test_partition_rejects_unkeyed_records():
    with pytest.raises(ValueError):
        Batch(records=[Record(data={"id": 1})]).partition()


def test_empty_batch_partitions_to_nothing():
    assert Batch().partition() == {}
