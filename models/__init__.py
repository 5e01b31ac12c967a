from .contact_draft import ContactDraft
from .company_draft import CompanyDraft
from .company_record import CompanyRecord
from .lead_record import LeadRecord
from .outcomes import CompanyResolution, DuplicateMatch, EntryOutcome
from .notification_payloads import CompanyBatchPayload, LeadBatchPayload
from .run_summary import RunSummary

__all__ = [
    "ContactDraft",
    "CompanyDraft",
    "CompanyRecord",
    "LeadRecord",
    "CompanyResolution",
    "DuplicateMatch",
    "EntryOutcome",
    "CompanyBatchPayload",
    "LeadBatchPayload",
    "RunSummary",
]
