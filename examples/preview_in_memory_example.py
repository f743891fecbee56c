import logging

from dupsweep import config
from dupsweep.config import RunMode
from dupsweep.jobs import build_pipeline
from dupsweep.stores import InMemoryRecordStore

config.set_logging_level(logging.BATCH)  # type: ignore

store = InMemoryRecordStore(
    rows=[
        {"id": 10, "transaction_number": "IR-10", "record_type": "itemreceipt", "parent_id": "RA-1"},
        {"id": 11, "transaction_number": "IR-11", "record_type": "itemreceipt", "parent_id": "RA-1"},
        {"id": 12, "transaction_number": "CR-12", "record_type": "cashrefund", "parent_id": "RA-1"},
        {"id": 20, "transaction_number": "IR-20", "record_type": "itemreceipt", "parent_id": "RA-2"},
    ]
)

pipeline, summary_sink = build_pipeline(store, "RA-1\nRA-1\n \nRA-2")

if __name__ == "__main__":
    print(pipeline)
    config.set_run_mode(RunMode.PREVIEW)
    pipeline.run()
    print(summary_sink.summary)
