from enum import Enum


class RunMode(Enum):
    """Modes in which pipelines can be run. PREVIEW plans deletions without touching the store."""

    WRITE = "WRITE"
    PREVIEW = "PREVIEW"
