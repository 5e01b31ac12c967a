from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config.settings import get_settings
from db.repos.companies_repo import CompaniesRepo
from db.repos.leads_repo import LeadsRepo
from ports.notifications import NotificationSink
from services.notifications import build_company_payload, build_lead_payload, now_ms


logger = logging.getLogger(__name__)

LEAD_FALLBACK_CLIENT = "fallback_system"
COMPANY_FALLBACK_CLIENT = "company_fallback_system"
MAX_BACKFILL = 500


def _limit(limit: Optional[int]) -> int:
    value = limit if limit is not None else get_settings().backfill_limit
    return max(0, min(value, MAX_BACKFILL))


def notify_unclassified_leads(conn: sqlite3.Connection, sink: NotificationSink, limit: Optional[int] = None) -> Dict[str, Any]:
    """Send every active lead still lacking a function group in a single lead batch.

    The leads are stamped as fallback-processed afterwards. Errors are
    reported in the returned message rather than raised.
    """
    repo = LeadsRepo(conn)
    try:
        rows = repo.select_unclassified(_limit(limit))
        if not rows:
            logger.info("No leads without function group", extra={"step": "backfill"})
            return {
                "processed": 0,
                "batches_sent": 0,
                "leads_found": 0,
                "message": "No leads found without function group - all leads are enriched",
            }

        leads = [(str(lead_id), job_title or "Unknown") for lead_id, _, job_title in rows]
        sink.send("leads", build_lead_payload(1, leads, LEAD_FALLBACK_CLIENT, now_ms()))
        repo.mark_fallback_processed([lead_id for lead_id, _, _ in rows])
    except (sqlite3.Error, ValidationError) as e:
        logger.error("Lead backfill failed", extra={"step": "backfill", "error": str(e)})
        return {"processed": 0, "batches_sent": 0, "leads_found": 0, "message": f"Fallback enrichment failed: {e}"}

    logger.info("Sent %s unclassified leads in 1 batch", len(rows), extra={"step": "backfill", "batch": 1})
    return {
        "processed": len(rows),
        "batches_sent": 1,
        "leads_found": len(rows),
        "message": f"Successfully sent {len(rows)} leads without function group for enrichment in 1 batch",
    }


def notify_unsummarized_companies(
    conn: sqlite3.Connection, sink: NotificationSink, limit: Optional[int] = None
) -> Dict[str, Any]:
    """Send every company with a domain but no summary in a single company batch."""
    repo = CompaniesRepo(conn)
    try:
        rows = repo.select_unsummarized(_limit(limit))
        if not rows:
            logger.info("No companies without summary", extra={"step": "backfill"})
            return {
                "processed": 0,
                "batches_sent": 0,
                "companies_found": 0,
                "message": "No companies found without summary - all companies are enriched",
            }

        companies = [(domain or "unknown.com", str(company_id)) for company_id, _, domain in rows]
        sink.send("companies", build_company_payload(1, companies, COMPANY_FALLBACK_CLIENT, now_ms()))
        repo.mark_fallback_processed([company_id for company_id, _, _ in rows])
    except (sqlite3.Error, ValidationError) as e:
        logger.error("Company backfill failed", extra={"step": "backfill", "error": str(e)})
        return {
            "processed": 0,
            "batches_sent": 0,
            "companies_found": 0,
            "message": f"Company fallback enrichment failed: {e}",
        }

    logger.info("Sent %s unsummarized companies in 1 batch", len(rows), extra={"step": "backfill", "batch": 1})
    return {
        "processed": len(rows),
        "batches_sent": 1,
        "companies_found": len(rows),
        "message": f"Successfully sent {len(rows)} companies without summary for enrichment in 1 batch",
    }


class CompanySummaryUpdate(BaseModel):
    """One summary result posted back by the enrichment automation."""

    company_id: int
    company_summary: str = Field(alias="companySummary")
    short_company_summary: Optional[str] = Field(default=None, alias="shortCompanySummary")
    industry_label: Optional[str] = Field(default=None, alias="industryLabel")
    subindustry_label: Optional[str] = Field(default=None, alias="subindustryLabel")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def apply_company_summaries(conn: sqlite3.Connection, items: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Store summaries and mark the companies fully enriched; each item succeeds or fails on its own."""
    repo = CompaniesRepo(conn)
    updated = 0
    failed = 0
    for raw in items:
        try:
            item = CompanySummaryUpdate.model_validate(raw)
            if not repo.apply_summary(item.company_id, item.model_dump(exclude={"company_id"})):
                raise LookupError(f"Company {item.company_id} not found")
            updated += 1
        except (ValidationError, LookupError, sqlite3.Error) as e:
            failed += 1
            company_ref = raw.get("company_id") if isinstance(raw, dict) else None
            logger.error("Failed to update company %s", company_ref, extra={"step": "summaries", "error": str(e)})

    message = f"Updated {updated} companies successfully, {failed} failed"
    logger.info(message, extra={"step": "summaries"})
    return {"updated": updated, "failed": failed, "message": message}
