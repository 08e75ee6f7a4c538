"""Outcome of one export or import run."""

from dataclasses import dataclass, field
from enum import Enum


class SyncStatus(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    IO_ERROR = "io_error"


@dataclass(frozen=True)
class SyncResult:
    """
    Attributes:
        status: How the run ended.
        message: Short human-readable summary.
        counts: Records written (export) or applied (import) per collection.
                Import also reports 'videos_added' and 'videos_skipped'.
    """
    status: SyncStatus
    message: str = ""
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is not SyncStatus.IO_ERROR
