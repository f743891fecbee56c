from types import TracebackType
from typing import Iterable, Type

from dupsweep.core import (
    DEFAULT_PAGE_SIZE,
    Batch,
    CandidateRecord,
    ErrorHandlingMethod,
    ParentId,
    Record,
    RecordStore,
    Source,
    SourceError,
)
from dupsweep.utils.parameters import ParameterSource, StaticParameter, parse_parent_ids


class CandidateSearchSource(Source):
    """Enumerates descendant records created from a set of parent documents.

    The whole result set is drained page by page. A failed search is logged and
    yields an empty batch, so the run continues with no work.
    """

    def __init__(
        self,
        store: RecordStore,
        parent_ids: ParameterSource | str | list[str],
        parent_kind: str = "RtnAuth",
        page_size: int = DEFAULT_PAGE_SIZE,
        name: str | None = None,
        error_handling_method: ErrorHandlingMethod = ErrorHandlingMethod.DEFAULT,
        expose_metrics: bool = False,
    ) -> None:
        """Initialize the `CandidateSearchSource`.

        Args:
            store (RecordStore): Store queried for descendant records.
            parent_ids (ParameterSource | str | list[str]): Newline separated parent IDs, or a source supplying them.
            parent_kind (str, optional): Kind of the parent documents. Defaults to "RtnAuth".
            page_size (int, optional): Rows requested per page. Defaults to 1000.
            name (str, optional): Stage name. Defaults to class name if name = None.
            error_handling_method (ErrorHandlingMethod, optional): Enum that represents how the stage would like the pipeline to handle errors which occur when running this stage. By default, errored records are sent to the pipeline's error handlers.
            expose_metrics (bool, optional): Whether or not to expose metrics for this source. Defaults to False.
        """
        Source.__init__(
            self,
            name=name,
            error_handling_method=error_handling_method,
            expose_metrics=expose_metrics,
        )
        if page_size < 1:
            raise ValueError("page_size must be greater than 0")
        if not isinstance(parent_ids, ParameterSource):
            parent_ids = StaticParameter(parent_ids)
        self.store = store
        self.parameter = parent_ids
        self.parent_kind = parent_kind
        self.page_size = page_size

    def read_parent_ids(self) -> list[ParentId]:
        return parse_parent_ids(self.parameter.get())

    def enumerate(self, parent_ids: Iterable[ParentId]) -> list[CandidateRecord]:
        """Query the store for every candidate created from `parent_ids`.

        Rows that do not parse into a `CandidateRecord` are logged and skipped.

        Returns:
            list[CandidateRecord]: Candidates in page order. Empty when the search fails.
        """
        candidates: list[CandidateRecord] = []
        for row in self.search_rows(parent_ids):
            try:
                candidates.append(CandidateRecord.from_dict(row))
            except (TypeError, ValueError) as e:
                self.log.error(f"{self.name}: dropping malformed candidate {row}: {e}")
        return candidates

    def search_rows(self, parent_ids: Iterable[ParentId]) -> list[dict]:
        """Drain every page of the search and return the raw rows in page order."""
        unique_ids = list(dict.fromkeys(parent_ids))
        if not unique_ids:
            self.log.info(f"{self.name}: no parent IDs supplied, nothing to read")
            return []
        self.log.debug(
            f"{self.name}: reading duplicate records for {len(unique_ids)} parents {unique_ids}"
        )
        rows: list[dict] = []
        try:
            for page in self.store.search(
                unique_ids, self.parent_kind, page_size=self.page_size
            ):
                rows.extend(page)
        except Exception as e:
            error = SourceError(
                stage_name=self.name,
                message=f"Stage {self.name} failed reading duplicate records.",
                handling_method=self.error_handling_method,
            )
            error.__cause__ = e
            if self.error_handling_method == ErrorHandlingMethod.RAISE:
                raise error
            self.log.error(self.serialize(error.as_dict()))
            return []
        self.log.debug(f"{self.name}: {len(rows)} candidate records")
        return rows

    def process_batch(self, batch: Batch | None) -> Batch:
        try:
            parent_ids = self.read_parent_ids()
        except Exception as e:
            if self.error_handling_method == ErrorHandlingMethod.RAISE:
                raise e
            self.log.error(f"{self.name}: unable to read parent IDs: {e!r}")
            parent_ids = []
        return Batch(
            records=[
                Record(data=dict(row), sequence=sequence)
                for sequence, row in enumerate(self.search_rows(parent_ids))
            ]
        )

    def __enter__(self) -> None:
        self.log.debug(f"{self.name}: opening search against {type(self.store).__name__}")

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        return False
