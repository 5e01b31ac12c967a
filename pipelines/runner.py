from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from models.run_summary import RunSummary
from services.notifications import NotificationDispatcher
from utils.logging_setup import init_logging


@dataclass
class FailedEntry:
    entry: Any
    error: str
    batch_number: int


@dataclass
class PipelineRunStats:
    processed: int = 0
    contacts_created: int = 0
    companies_created: int = 0
    duplicates_skipped: int = 0
    filtered_out: int = 0
    skip_reasons: Dict[str, int] = field(default_factory=dict)
    duplicate_methods: Dict[str, int] = field(default_factory=dict)
    permanently_failed: List[FailedEntry] = field(default_factory=list)

    def message(self) -> str:
        return (
            f"Processed {self.processed} entries: {self.contacts_created} contacts created, "
            f"{self.companies_created} companies created, {self.duplicates_skipped} duplicates skipped, "
            f"{self.filtered_out} filtered out (no email/invalid website)"
        )

    def to_summary(self) -> RunSummary:
        return RunSummary(
            processed=self.processed,
            contacts_created=self.contacts_created,
            companies_created=self.companies_created,
            duplicates_skipped=self.duplicates_skipped,
            filtered_out=self.filtered_out,
            message=self.message(),
            skip_reasons=dict(self.skip_reasons),
            duplicate_methods=dict(self.duplicate_methods),
            permanently_failed=len(self.permanently_failed),
        )


@dataclass
class RunContext:
    source: Optional[str] = None
    client_id: str = "default"
    raw_text: Optional[str] = None
    entries: List[Any] = field(default_factory=list)
    failures: List[FailedEntry] = field(default_factory=list)
    stats: PipelineRunStats = field(default_factory=PipelineRunStats)
    dispatcher: Optional[NotificationDispatcher] = None
    # clock() value after which no further entries are started
    deadline: Optional[float] = None
    deadline_exceeded: bool = False
    clock: Callable[[], float] = time.monotonic

    def check_deadline(self) -> bool:
        """Return True (and remember it) once the run deadline has passed."""
        if self.deadline is not None and not self.deadline_exceeded and self.clock() >= self.deadline:
            self.deadline_exceeded = True
        return self.deadline_exceeded


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            ctx = step.run(ctx)
        return ctx
