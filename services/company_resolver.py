from __future__ import annotations

import logging

from models.company_draft import UNKNOWN_COMPANY, CompanyDraft
from models.contact_draft import ContactDraft
from models.outcomes import CompanyResolution, CompanyTier
from ports.repos import CompaniesRepoPort
from services.domain_utils import company_name_from_domain, is_free_mail_domain, normalize_domain


logger = logging.getLogger(__name__)


class CompanyResolver:
    """Finds or creates the owning company for a contact.

    Tiers, most reliable first:
      1. the contact's email domain (unless it is a free-mail provider)
      2. the scraped company domain, when it differs from the email domain
      3. the company name alone; names are not unique so this tier is a
         best guess and may link unrelated contacts that share a name
    """

    def __init__(self, companies: CompaniesRepoPort) -> None:
        self.companies = companies

    def _find_or_create(self, draft: CompanyDraft, tier: CompanyTier) -> CompanyResolution:
        existing = (
            self.companies.find_company_by_domain(draft.domain)
            if draft.domain
            else self.companies.find_company_by_name(draft.name or "")
        )
        if existing:
            logger.debug("Linked to existing company %s via %s", existing.id, tier, extra={"step": "company"})
            return CompanyResolution(company_id=existing.id, created=False, tier=tier, domain=existing.domain)

        company_id, created = self.companies.create_company(draft)
        if created:
            logger.info(
                "Created company %s via %s: %s",
                company_id,
                tier,
                draft.domain or draft.name,
                extra={"step": "company", "status": "created"},
            )
        return CompanyResolution(company_id=company_id, created=created, tier=tier, domain=draft.domain)

    def resolve(self, contact: ContactDraft, draft: CompanyDraft) -> CompanyResolution:
        email_domain = normalize_domain(contact.email)

        if email_domain and not is_free_mail_domain(email_domain):
            forced = draft.model_copy(
                update={
                    "domain": email_domain,
                    "name": draft.name or company_name_from_domain(email_domain),
                    "website": draft.website or f"https://{email_domain}",
                }
            )
            return self._find_or_create(forced, "email_domain")

        if draft.domain and draft.domain != email_domain:
            return self._find_or_create(draft, "scraped_domain")

        if draft.name and draft.name != UNKNOWN_COMPANY:
            return self._find_or_create(draft.model_copy(update={"domain": None}), "name_only")

        logger.info(
            "No company linked for %s %s",
            contact.first_name or "",
            contact.last_name or "",
            extra={"step": "company", "status": "unlinked"},
        )
        return CompanyResolution()
