from .in_memory import InMemoryRecordStore
from .salesforce import SalesforceRecordStore

__all__ = [
    "InMemoryRecordStore",
    "SalesforceRecordStore",
]
