import abc
from typing import Any, Iterator, Sequence

from dupsweep.core.candidate import ParentId, RecordId
from dupsweep.utils.log import LoggingMixin

# Type aliases
SearchPage = list[dict[str, Any]]

DEFAULT_PAGE_SIZE = 1000


class RecordStore(abc.ABC, LoggingMixin):
    """Narrow interface to the document store holding descendant transactions."""

    @abc.abstractmethod
    def search(
        self,
        parent_ids: Sequence[ParentId],
        parent_kind: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Iterator[SearchPage]:
        """Yield pages of main-line descendant records created from `parent_ids`.

        Every row is a dict keyed by `CandidateRecord` field names. Rows are
        ordered ascending by transaction number across pages.

        Args:
            parent_ids (Sequence[str]): Parent document identifiers.
            parent_kind (str): Kind of the parent document (e.g. "RtnAuth").
            page_size (int, optional): Rows per page. Defaults to 1000.
        """
        pass

    @abc.abstractmethod
    def delete(self, record_type: str, record_id: RecordId) -> None:
        """Delete one document. Raises on failure."""
        pass
