from .duplicate_resolver import (
    DEFAULT_TRACKED_TYPES,
    DuplicateCounter,
    DuplicateResolverStage,
    find_excess_duplicates,
    iter_excess_duplicates,
)
from .partition import PartitionStage

__all__ = [
    "DEFAULT_TRACKED_TYPES",
    "DuplicateCounter",
    "DuplicateResolverStage",
    "PartitionStage",
    "find_excess_duplicates",
    "iter_excess_duplicates",
]
