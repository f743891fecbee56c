from .run_summary import RunSummarySink, aggregate

__all__ = [
    "RunSummarySink",
    "aggregate",
]
