from __future__ import annotations

from typing import Optional

from models.company_draft import CompanyDraft
from models.contact_draft import ContactDraft
from models.outcomes import DuplicateMatch
from ports.repos import CompaniesRepoPort, LeadsRepoPort


class DuplicateResolver:
    """Checks a contact against existing leads: email, then LinkedIn URL, then name at the same company."""

    def __init__(self, leads: LeadsRepoPort, companies: CompaniesRepoPort) -> None:
        self.leads = leads
        self.companies = companies

    def _by_name_and_company(self, contact: ContactDraft, company_domain: Optional[str]) -> Optional[int]:
        if not (contact.first_name and contact.last_name and company_domain):
            return None
        company = self.companies.find_company_by_domain(company_domain)
        if company is None:
            return None
        lead = self.leads.find_lead_by_name_and_company(contact.first_name, contact.last_name, company.id)
        return lead.id if lead else None

    def find_duplicate(self, contact: ContactDraft, company: CompanyDraft) -> DuplicateMatch:
        if contact.email and contact.email.strip():
            lead = self.leads.find_lead_by_email(contact.email.strip().lower())
            if lead:
                return DuplicateMatch(found=True, method="email", existing_id=lead.id)

        if contact.linkedin_url:
            lead = self.leads.find_lead_by_linkedin(contact.linkedin_url)
            if lead:
                return DuplicateMatch(found=True, method="linkedin", existing_id=lead.id)

        existing_id = self._by_name_and_company(contact, company.domain)
        if existing_id is not None:
            return DuplicateMatch(found=True, method="name_company", existing_id=existing_id)

        return DuplicateMatch(found=False)
