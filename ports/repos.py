from __future__ import annotations

from typing import Optional, Protocol, Tuple

from models.company_draft import CompanyDraft
from models.company_record import CompanyRecord
from models.contact_draft import ContactDraft
from models.lead_record import LeadRecord


class LeadsRepoPort(Protocol):
    def find_lead_by_email(self, email: str) -> Optional[LeadRecord]:
        ...

    def find_lead_by_linkedin(self, linkedin_url: str) -> Optional[LeadRecord]:
        ...

    def find_lead_by_name_and_company(self, first_name: str, last_name: str, company_id: int) -> Optional[LeadRecord]:
        ...

    def upsert_lead(self, draft: ContactDraft, company_id: Optional[int]) -> Tuple[int, bool]:
        ...


class CompaniesRepoPort(Protocol):
    def find_company_by_domain(self, domain: str) -> Optional[CompanyRecord]:
        ...

    def find_company_by_name(self, name: str) -> Optional[CompanyRecord]:
        ...

    def create_company(self, draft: CompanyDraft) -> Tuple[int, bool]:
        ...

    def get_company(self, company_id: int) -> Optional[CompanyRecord]:
        ...
