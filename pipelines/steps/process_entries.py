from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Optional

from config.settings import get_settings
from models.outcomes import EntryOutcome
from pipelines.entry_processor import EntryProcessor
from pipelines.runner import FailedEntry, RunContext


logger = logging.getLogger(__name__)


def _bump(tally: dict, key: Optional[str]) -> None:
    if key:
        tally[key] = tally.get(key, 0) + 1


def apply_outcome(ctx: RunContext, outcome: EntryOutcome) -> None:
    """Fold one entry outcome into the run statistics and notification queues."""
    stats = ctx.stats
    if outcome.action == "created":
        stats.contacts_created += 1
        if outcome.company_created:
            stats.companies_created += 1
        if ctx.dispatcher is not None:
            if outcome.company_id is not None and outcome.company_domain:
                ctx.dispatcher.record_company(outcome.company_id, outcome.company_domain)
            if outcome.lead_created and outcome.lead_id is not None:
                ctx.dispatcher.record_lead(outcome.lead_id, outcome.job_title)
    elif outcome.action == "duplicate":
        stats.duplicates_skipped += 1
        _bump(stats.duplicate_methods, outcome.duplicate_method)
    elif outcome.action == "skipped":
        stats.filtered_out += 1
        _bump(stats.skip_reasons, outcome.reason)
    stats.processed += 1


def _email_hint(entry: Any) -> str:
    if isinstance(entry, dict):
        return str(entry.get("email") or "no email")
    return "no email"


class ProcessBatches:
    """Processes entries in fixed-size batches; one bad entry never stops the batch."""

    def __init__(
        self,
        processor: EntryProcessor,
        batch_size: Optional[int] = None,
        batch_delay_ms: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        settings = get_settings()
        self.processor = processor
        self.batch_size = max(1, batch_size or settings.ingest_batch_size)
        self.batch_delay_ms = settings.ingest_batch_delay_ms if batch_delay_ms is None else batch_delay_ms
        self.sleep = sleep

    def run(self, ctx: RunContext) -> RunContext:
        entries = ctx.entries
        total_batches = math.ceil(len(entries) / self.batch_size)
        stats = ctx.stats

        for start in range(0, len(entries), self.batch_size):
            batch = entries[start : start + self.batch_size]
            batch_number = start // self.batch_size + 1
            logger.info(
                "Batch %s/%s (%s%%) - %s entries; so far %s created, %s duplicates, %s filtered",
                batch_number,
                total_batches,
                round(batch_number / total_batches * 100),
                len(batch),
                stats.contacts_created,
                stats.duplicates_skipped,
                stats.filtered_out,
                extra={"step": "process", "batch": batch_number},
            )

            for entry in batch:
                if ctx.check_deadline():
                    logger.warning("Run deadline reached; stopping", extra={"step": "process", "batch": batch_number})
                    return ctx
                try:
                    outcome = self.processor.process(entry)
                except Exception as e:
                    logger.error(
                        "Failed entry in batch %s",
                        batch_number,
                        extra={"step": "process", "batch": batch_number, "error": str(e)},
                    )
                    ctx.failures.append(FailedEntry(entry=entry, error=str(e), batch_number=batch_number))
                    continue
                apply_outcome(ctx, outcome)

            if start + self.batch_size < len(entries) and self.batch_delay_ms > 0:
                if ctx.check_deadline():
                    return ctx
                self.sleep(self.batch_delay_ms / 1000.0)

        return ctx


class RetryFailures:
    """Gives each failed entry exactly one more attempt."""

    def __init__(self, processor: EntryProcessor) -> None:
        self.processor = processor

    def run(self, ctx: RunContext) -> RunContext:
        if not ctx.failures:
            return ctx
        logger.info("Retrying %s failed entries", len(ctx.failures), extra={"step": "retry"})

        recovered = 0
        for failed in ctx.failures:
            if ctx.check_deadline():
                ctx.stats.permanently_failed.append(failed)
                continue
            try:
                outcome = self.processor.process(failed.entry)
            except Exception as e:
                logger.error(
                    "Permanently failed entry (%s): original=%s retry=%s",
                    _email_hint(failed.entry),
                    failed.error,
                    e,
                    extra={"step": "retry", "batch": failed.batch_number, "error": str(e)},
                )
                ctx.stats.permanently_failed.append(failed)
                continue
            apply_outcome(ctx, outcome)
            recovered += 1

        logger.info("Retry complete: %s/%s recovered", recovered, len(ctx.failures), extra={"step": "retry"})
        return ctx
