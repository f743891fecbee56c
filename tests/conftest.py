import logging
from typing import Generator

import pytest

from dupsweep import config
from dupsweep.config import RunMode
from dupsweep.core import ErrorHandlingMethod, Record, Stage
from dupsweep.stores import InMemoryRecordStore
from tests.helpers import candidate_row


@pytest.fixture(autouse=True)
def _reset_config() -> Generator[None, None, None]:
    yield
    config.set_run_mode(RunMode.PREVIEW)
    config.set_logging_level(logging.INFO)


@pytest.fixture
def write_mode() -> None:
    config.set_run_mode(RunMode.WRITE)


class ErrorStage(Stage):
    def process_record(self, record: Record) -> Record:
        raise ValueError("A wild error appeared!")


@pytest.fixture(scope="function")
def send_to_error_stage() -> Stage:
    return ErrorStage(
        error_handling_method=ErrorHandlingMethod.SEND_TO_ERROR,
        name="SendToErrorStage",
    )


@pytest.fixture(scope="function")
def stop_pipeline_stage() -> Stage:
    return ErrorStage(
        error_handling_method=ErrorHandlingMethod.STOP_PIPELINE,
        name="StopPipelineStage",
    )


@pytest.fixture
def scenario_rows() -> list[dict]:
    """RA-1 holds two item receipts and a cash refund, RA-2 a single item receipt."""
    return [
        candidate_row(10, "itemreceipt", "RA-1"),
        candidate_row(11, "itemreceipt", "RA-1"),
        candidate_row(12, "cashrefund", "RA-1"),
        candidate_row(20, "itemreceipt", "RA-2"),
    ]


@pytest.fixture
def scenario_store(scenario_rows) -> InMemoryRecordStore:
    return InMemoryRecordStore(rows=scenario_rows)
