from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

import requests

from config.settings import get_settings
from models.notification_payloads import CompanyBatchPayload, LeadBatchPayload
from ports.notifications import Channel, NotificationSink
from ports.repos import CompaniesRepoPort


logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def build_lead_payload(batch_number: int, leads: List[Tuple[str, str]], client_id: str, timestamp: int) -> Dict[str, Any]:
    return LeadBatchPayload(
        batch_number=batch_number,
        leads_in_batch=len(leads),
        client_id=client_id,
        timestamp=timestamp,
        lead_ids=[lead_id for lead_id, _ in leads],
        job_titles=[title for _, title in leads],
        message=f"Batch {batch_number}: {len(leads)} leads processed",
    ).model_dump()


def build_company_payload(
    batch_number: int, companies: List[Tuple[str, str]], client_id: str, timestamp: int
) -> Dict[str, Any]:
    return CompanyBatchPayload(
        batch_number=batch_number,
        companies_in_batch=len(companies),
        client_id=client_id,
        timestamp=timestamp,
        domains=[domain for domain, _ in companies],
        company_ids=[company_id for _, company_id in companies],
        message=f"Company batch {batch_number}: {len(companies)} companies processed",
    ).model_dump()


class WebhookNotificationSink:
    """POSTs batch payloads as JSON to the configured automation webhooks.

    Delivery is fire-and-forget: failures are logged and never raised.
    """

    def __init__(
        self,
        lead_url: Optional[str] = None,
        company_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self.urls: Dict[str, Optional[str]] = {
            "leads": lead_url if lead_url is not None else settings.lead_webhook_url,
            "companies": company_url if company_url is not None else settings.company_webhook_url,
        }
        self.timeout_seconds = timeout_seconds or settings.http_timeout_seconds

    def send(self, channel: Channel, payload: Dict[str, Any]) -> None:
        url = self.urls.get(channel)
        batch = payload.get("batch_number")
        if not url:
            logger.info(
                "No %s webhook configured; dropping batch %s",
                channel,
                batch,
                extra={"step": "notify", "batch": batch, "status": "dropped"},
            )
            return
        try:
            resp = requests.post(url, json=payload, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as e:
            logger.error(
                "Webhook error for %s batch %s",
                channel,
                batch,
                extra={"step": "notify", "batch": batch, "error": str(e)},
            )
            return
        if resp.ok:
            logger.info("Webhook %s batch %s sent", channel, batch, extra={"step": "notify", "batch": batch, "status": "sent"})
        else:
            logger.error(
                "Webhook %s batch %s failed with HTTP %s",
                channel,
                batch,
                resp.status_code,
                extra={"step": "notify", "batch": batch, "status": resp.status_code},
            )


class NotificationDispatcher:
    """Accumulates created leads and newly seen companies for one run and flushes them in batches.

    Batch numbers start at 1 per channel and only increase. Each company
    domain is queued at most once per run, and companies that are already
    fully enriched are never queued.
    """

    def __init__(
        self,
        sink: NotificationSink,
        client_id: str,
        batch_size: Optional[int] = None,
        companies: Optional[CompaniesRepoPort] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.sink = sink
        self.client_id = client_id
        self.batch_size = batch_size or get_settings().notification_batch_size
        self.companies = companies
        self.clock = clock

        self.pending_leads: List[Tuple[str, str]] = []
        self.pending_companies: List[Tuple[str, str]] = []
        self.lead_batches_sent = 0
        self.company_batches_sent = 0
        self.seen_domains: Set[str] = set()
        self._enriched_cache: Dict[int, bool] = {}

    def _already_enriched(self, company_id: int) -> bool:
        if self.companies is None:
            return False
        if company_id not in self._enriched_cache:
            try:
                company = self.companies.get_company(company_id)
            except Exception as e:
                logger.warning(
                    "Could not read enrichment state of company %s; queueing it",
                    company_id,
                    extra={"step": "notify", "error": str(e)},
                )
                return False
            self._enriched_cache[company_id] = bool(company and company.full_enrichment)
        return self._enriched_cache[company_id]

    def record_lead(self, lead_id: Any, job_title: Optional[str]) -> None:
        self.pending_leads.append((str(lead_id), job_title or "Unknown"))
        logger.debug("Lead queued for notification: %s (%s/%s)", lead_id, len(self.pending_leads), self.batch_size)
        if len(self.pending_leads) >= self.batch_size:
            self.flush_leads()

    def record_company(self, company_id: Any, domain: Optional[str]) -> bool:
        """Queue a company once per domain per run. Returns True when queued."""
        if company_id is None or not domain or domain in self.seen_domains:
            return False
        if self._already_enriched(int(company_id)):
            return False
        self.seen_domains.add(domain)
        self.pending_companies.append((domain, str(company_id)))
        logger.debug("Company queued for notification: %s (%s/%s)", domain, len(self.pending_companies), self.batch_size)
        if len(self.pending_companies) >= self.batch_size:
            self.flush_companies()
        return True

    def _send(self, channel: Channel, payload: Dict[str, Any]) -> None:
        # A lost notification never fails the run
        try:
            self.sink.send(channel, payload)
        except Exception as e:
            logger.error(
                "Notification sink failed for %s batch %s",
                channel,
                payload.get("batch_number"),
                extra={"step": "notify", "batch": payload.get("batch_number"), "error": str(e)},
            )

    def flush_leads(self) -> None:
        while self.pending_leads:
            batch = self.pending_leads[: self.batch_size]
            del self.pending_leads[: self.batch_size]
            self.lead_batches_sent += 1
            payload = build_lead_payload(self.lead_batches_sent, batch, self.client_id, self.clock())
            self._send("leads", payload)

    def flush_companies(self) -> None:
        while self.pending_companies:
            batch = self.pending_companies[: self.batch_size]
            del self.pending_companies[: self.batch_size]
            self.company_batches_sent += 1
            payload = build_company_payload(self.company_batches_sent, batch, self.client_id, self.clock())
            self._send("companies", payload)

    def flush_all(self) -> None:
        self.flush_leads()
        self.flush_companies()


def send_test_batches(sink: NotificationSink, client_id: str, count: int = 12, batch_size: Optional[int] = None) -> Dict[str, Any]:
    """Emit `count` synthetic leads through the lead webhook to verify the downstream automation."""
    dispatcher = NotificationDispatcher(sink, client_id, batch_size=batch_size)
    stamp = now_ms()
    for i in range(1, count + 1):
        dispatcher.record_lead(f"p5test{i:03d}lead{stamp}", f"Test Job {i}")
    dispatcher.flush_all()
    batches = dispatcher.lead_batches_sent
    return {
        "success": True,
        "message": f"Test completed with {batches} batches sent",
        "batchesSent": batches,
    }
