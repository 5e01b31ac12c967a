from __future__ import annotations

import logging
from typing import Any, Mapping

from models.outcomes import EntryOutcome
from services.company_resolver import CompanyResolver
from services.duplicates import DuplicateResolver
from services.extraction import extract_record
from services.lead_writer import LeadWriter
from services.validation_gate import ValidationGate


logger = logging.getLogger(__name__)


class EntryProcessor:
    """Runs one raw record through extract -> gate -> dedupe -> company -> lead.

    Business rejections come back as `skipped`/`duplicate` outcomes; anything
    unexpected is raised for the caller to record as a failure.
    """

    def __init__(
        self,
        gate: ValidationGate,
        duplicates: DuplicateResolver,
        companies: CompanyResolver,
        writer: LeadWriter,
    ) -> None:
        self.gate = gate
        self.duplicates = duplicates
        self.companies = companies
        self.writer = writer

    def process(self, entry: Any) -> EntryOutcome:
        # JSON arrays and scalars carry no contact fields
        if not isinstance(entry, Mapping):
            logger.debug("Skipped non-object entry", extra={"step": "validate", "reason": "no_email"})
            return EntryOutcome(action="skipped", reason="no_email")

        record = extract_record(entry)
        contact, company = record.contact, record.company

        verdict = self.gate.evaluate(record)
        if not verdict.passed:
            logger.debug("Skipped %s", contact.email, extra={"step": "validate", "reason": verdict.reason})
            return EntryOutcome(action="skipped", reason=verdict.reason)

        if not company.website and verdict.website:
            company = company.model_copy(update={"website": verdict.website})

        match = self.duplicates.find_duplicate(contact, company)
        if match.found:
            logger.debug(
                "Duplicate via %s: %s",
                match.method,
                contact.email,
                extra={"step": "dedupe", "reason": match.method},
            )
            return EntryOutcome(action="duplicate", duplicate_method=match.method, existing_id=match.existing_id)

        resolution = self.companies.resolve(contact, company)
        lead_id, lead_created = self.writer.upsert_lead(contact, resolution.company_id)

        return EntryOutcome(
            action="created",
            lead_id=lead_id,
            lead_created=lead_created,
            company_id=resolution.company_id,
            company_domain=resolution.domain,
            company_created=resolution.created,
            job_title=contact.job_title,
        )
