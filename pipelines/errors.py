from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from models.run_summary import RunSummary


class IngestionError(RuntimeError):
    """A run-level failure that aborts ingestion before any summary is produced."""


class PayloadFetchError(IngestionError):
    pass


class EmptyPayloadError(IngestionError):
    pass


class RunDeadlineExceeded(IngestionError):
    """The run ran out of wall-clock time; `summary` holds what was processed so far."""

    def __init__(self, message: str, summary: Optional["RunSummary"] = None) -> None:
        super().__init__(message)
        self.summary = summary
