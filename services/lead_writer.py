from __future__ import annotations

import logging
from typing import Optional, Tuple

from models.contact_draft import ContactDraft
from ports.repos import LeadsRepoPort


logger = logging.getLogger(__name__)


class LeadWriter:
    def __init__(self, leads: LeadsRepoPort) -> None:
        self.leads = leads

    def upsert_lead(self, contact: ContactDraft, company_id: Optional[int]) -> Tuple[int, bool]:
        """Create the lead, or patch the existing one with the same email.

        Returns (lead_id, created).
        """
        normalized = contact.model_copy(update={"email": (contact.email or "").strip().lower()})
        lead_id, created = self.leads.upsert_lead(normalized, company_id)
        if created:
            logger.debug("Created lead %s", lead_id, extra={"step": "lead", "status": "created"})
        else:
            logger.info(
                "Lead already existed for %s; patched %s",
                normalized.email,
                lead_id,
                extra={"step": "lead", "status": "patched"},
            )
        return lead_id, created
