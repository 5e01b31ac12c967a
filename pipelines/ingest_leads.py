from __future__ import annotations

import logging
import sqlite3
import time
from typing import Optional

from config.settings import get_settings
from db.repos.companies_repo import CompaniesRepo
from db.repos.leads_repo import LeadsRepo
from models.run_summary import RunSummary
from pipelines.entry_processor import EntryProcessor
from pipelines.errors import RunDeadlineExceeded
from pipelines.runner import Pipeline, RunContext
from pipelines.steps import FetchPayload, ParseEntries, ProcessBatches, Reconcile, RetryFailures
from ports.fetcher import PayloadFetcher
from ports.notifications import NotificationSink
from ports.reachability import ReachabilityChecker
from services.company_resolver import CompanyResolver
from services.duplicates import DuplicateResolver
from services.lead_writer import LeadWriter
from services.notifications import NotificationDispatcher, WebhookNotificationSink
from services.payload_fetch import HttpPayloadFetcher
from services.validation_gate import ValidationGate
from services.website_check import AlwaysReachable, WebsiteQualityChecker


logger = logging.getLogger(__name__)


def build_entry_processor(conn: sqlite3.Connection, checker: ReachabilityChecker) -> EntryProcessor:
    leads = LeadsRepo(conn)
    companies = CompaniesRepo(conn)
    return EntryProcessor(
        gate=ValidationGate(checker),
        duplicates=DuplicateResolver(leads, companies),
        companies=CompanyResolver(companies),
        writer=LeadWriter(leads),
    )


def run_lead_ingestion(
    conn: sqlite3.Connection,
    source: str,
    client_id: Optional[str] = None,
    *,
    fetcher: Optional[PayloadFetcher] = None,
    checker: Optional[ReachabilityChecker] = None,
    sink: Optional[NotificationSink] = None,
    batch_size: Optional[int] = None,
    batch_delay_ms: Optional[int] = None,
    deadline_seconds: Optional[float] = None,
    sleep=time.sleep,
    clock=time.monotonic,
) -> RunSummary:
    """Fetch an export, ingest every entry and return the run summary.

    Raises PayloadFetchError / EmptyPayloadError before any entry is touched,
    and RunDeadlineExceeded (carrying the partial summary) when the deadline
    cuts the run short. Notifications queued so far are flushed in both the
    normal and the deadline case.
    """
    settings = get_settings()
    client_id = client_id or settings.default_client_id
    if checker is None:
        checker = AlwaysReachable() if settings.skip_website_check else WebsiteQualityChecker()
    if deadline_seconds is None:
        deadline_seconds = settings.run_deadline_seconds

    processor = build_entry_processor(conn, checker)
    dispatcher = NotificationDispatcher(
        sink or WebhookNotificationSink(),
        client_id,
        companies=CompaniesRepo(conn),
    )
    ctx = RunContext(
        source=source,
        client_id=client_id,
        dispatcher=dispatcher,
        deadline=(clock() + deadline_seconds) if deadline_seconds else None,
        clock=clock,
    )

    logger.info("Starting lead ingestion for client %s", client_id, extra={"step": "start"})
    pipeline = Pipeline(
        [
            FetchPayload(fetcher or HttpPayloadFetcher()),
            ParseEntries(),
            ProcessBatches(processor, batch_size=batch_size, batch_delay_ms=batch_delay_ms, sleep=sleep),
            RetryFailures(processor),
            Reconcile(),
        ]
    )
    ctx = pipeline.run(ctx)

    summary = ctx.stats.to_summary()
    if ctx.deadline_exceeded:
        logger.warning("Run stopped at deadline: %s", summary.message, extra={"step": "done", "status": "deadline"})
        raise RunDeadlineExceeded(f"Run deadline exceeded; {summary.message}", summary=summary)

    logger.info(summary.message, extra={"step": "done", "status": "ok"})
    return summary
