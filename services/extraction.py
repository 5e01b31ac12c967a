from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from models.company_draft import CompanyDraft
from models.contact_draft import ContactDraft
from services.domain_utils import (
    company_name_from_domain,
    extract_domain,
    normalize_domain,
)
from services.locations import normalize_location_dutch
from services.phone_utils import normalize_phone
from services.text_utils import (
    normalize_company_name,
    parse_company_technologies,
    sanitize_string,
    split_name,
)
from utils.number_parsing import parse_company_size


RawRecord = Mapping[str, Any]
# (entry, org) -> raw value
Accessor = Callable[[RawRecord, RawRecord], Any]

DEFAULT_JOB_TITLE = "Professional"
# Outlook addresses still yield a company name here; the company resolver excludes them
NAME_FALLBACK_FREE_MAIL = ("gmail", "hotmail", "yahoo")
ORG_KEYS = ("organization", "company", "org")


def top(key: str) -> Accessor:
    return lambda entry, org: entry.get(key)


def nested(key: str) -> Accessor:
    return lambda entry, org: org.get(key)


def domain_of(accessor: Accessor) -> Accessor:
    return lambda entry, org: extract_domain(accessor(entry, org))


def _name_head(entry: RawRecord, org: RawRecord) -> Any:
    name = entry.get("name")
    if isinstance(name, str):
        return name.split(" ")[0]
    return None


def _name_tail(entry: RawRecord, org: RawRecord) -> Any:
    name = entry.get("name")
    if isinstance(name, str):
        return " ".join(name.split(" ")[1:])
    return None


def _tops(*keys: str) -> List[Accessor]:
    return [top(k) for k in keys]


def _nesteds(*keys: str) -> List[Accessor]:
    return [nested(k) for k in keys]


CONTACT_ALIASES: Dict[str, List[Accessor]] = {
    "first_name": [top("first_name"), top("firstName"), _name_head, *_tops("contact_first_name", "given_name", "fname")],
    "last_name": [
        top("last_name"), top("lastName"), _name_tail,
        *_tops("contact_last_name", "family_name", "lname", "surname"),
    ],
    "email": _tops("email", "email_address", "contact_email", "work_email", "business_email", "primary_email"),
    "job_title": _tops(
        "title", "job_title", "position", "role", "job_position", "occupation",
        "designation", "current_title", "professional_title",
    ),
    "seniority": _tops("seniority", "seniority_level", "level", "rank"),
    "linkedin_url": _tops(
        "linkedin_url", "linkedin", "linkedin_profile", "li_url", "linked_in_url",
        "contact_linkedin", "linkedin_profile_url", "social_linkedin",
    ),
    # Personal/mobile numbers only; switchboard numbers belong to the company
    "mobile_phone": _tops(
        "mobile_phone", "mobile", "cell_phone", "personal_phone", "direct_phone",
        "contact_mobile", "private_phone",
    ),
    "country": [
        *_tops("country", "contact_country", "person_country"),
        *_nesteds("country", "company_country", "location_country"),
    ],
    "state": [
        *_tops("state", "region", "province", "contact_state"),
        *_nesteds("state", "region", "province", "company_state"),
    ],
    "city": [
        *_tops("city", "locality", "contact_city", "person_city"),
        *_nesteds("city", "locality", "company_city", "location_city"),
    ],
}

SECONDARY_EMAIL_ALIASES: List[Accessor] = _tops(
    "personal_email", "work_email", "email_address", "contact_email", "business_email", "primary_email"
)

SECONDARY_JOB_TITLE_ALIASES: List[Accessor] = _tops(
    "job_title", "position", "role", "current_position", "professional_title", "work_title"
)

COMPANY_ALIASES: Dict[str, List[Accessor]] = {
    "name": [
        *_nesteds("name", "company_name", "organization_name", "business_name", "company", "organization"),
        *_tops("company", "company_name", "organization", "employer"),
    ],
    "domain": [
        *_nesteds("domain", "website_domain", "company_domain"),
        lambda entry, org: extract_domain(_first_present(CONTACT_ALIASES["email"], entry, org)),
        domain_of(nested("website_url")),
        domain_of(nested("website")),
    ],
    "website": [
        *_nesteds("website_url", "website", "company_website", "web_site", "url", "homepage", "site_url"),
        *_tops("website", "company_website"),
    ],
    "linkedin_url": [
        *_nesteds(
            "linkedin_url", "company_linkedin", "linkedin", "linkedin_profile", "li_url",
            "social_linkedin", "company_linkedin_url",
        ),
        top("company_linkedin"),
    ],
    "scraped_industry": [
        *_nesteds(
            "industry", "sector", "business_type", "category", "industry_sector",
            "company_industry", "vertical",
        ),
        *_tops("industry", "sector", "company_industry"),
    ],
    "company_size": [
        *_nesteds(
            "estimated_num_employees", "employee_count", "employees", "size", "company_size",
            "headcount", "staff_count", "number_of_employees", "employee_range",
        ),
        *_tops("company_size", "employees", "headcount"),
    ],
    # Switchboard/main numbers only
    "company_phone": [
        *_nesteds(
            "phone", "work_phone", "main_phone", "business_phone", "office_phone",
            "company_phone", "headquarters_phone", "sanitized_phone",
        ),
        *_tops("phone", "phone_number", "work_phone", "business_phone", "company_phone"),
    ],
    "country": [
        *_nesteds("country", "company_country", "location_country", "headquarters_country"),
        top("company_country"),
    ],
    "state": [
        *_nesteds("state", "region", "province", "company_state", "headquarters_state"),
        top("company_state"),
    ],
    "city": [
        *_nesteds("city", "locality", "company_city", "location_city", "headquarters_city"),
        top("company_city"),
    ],
    "company_technologies": [
        *_nesteds(
            "technologies", "tech_stack", "technology_stack", "company_technologies",
            "tools", "software", "platforms",
        ),
        *_tops("technologies", "tech_stack", "technology_stack", "company_technologies", "tools", "software"),
    ],
}

SECONDARY_COMPANY_SIZE_ALIASES: List[Accessor] = _tops("company_headcount", "headcount", "employees_count")


def _location(kind: str) -> Callable[[Any], Optional[str]]:
    return lambda raw: normalize_location_dutch(raw, kind)  # type: ignore[arg-type]


CONTACT_NORMALIZERS: Dict[str, Callable[[Any], Any]] = {
    "mobile_phone": normalize_phone,
    "country": _location("country"),
    "state": _location("state"),
    "city": _location("city"),
}

COMPANY_NORMALIZERS: Dict[str, Callable[[Any], Any]] = {
    "domain": normalize_domain,
    "company_size": parse_company_size,
    "company_phone": normalize_phone,
    "company_technologies": parse_company_technologies,
    "country": _location("country"),
    "state": _location("state"),
    "city": _location("city"),
}


def _is_falsy(raw: Any) -> bool:
    if isinstance(raw, (list, dict)):
        return False
    return raw is None or raw is False or raw == "" or raw == 0


def _first_present(
    accessors: Sequence[Accessor],
    entry: RawRecord,
    org: RawRecord,
    normalize: Callable[[Any], Any] = sanitize_string,
) -> Any:
    """Evaluate accessors in order and return the first value that normalizes to present."""
    for accessor in accessors:
        raw = accessor(entry, org)
        if _is_falsy(raw):
            continue
        value = normalize(raw)
        if value is not None and value != "":
            return value
    return None


def organization_of(entry: RawRecord) -> RawRecord:
    for key in ORG_KEYS:
        candidate = entry.get(key)
        if isinstance(candidate, dict) and candidate:
            return candidate
    return {}


@dataclass
class ExtractedRecord:
    contact: ContactDraft
    company: CompanyDraft

    @property
    def email_domain(self) -> Optional[str]:
        return normalize_domain(self.contact.email)


def extract_contact(entry: RawRecord, org: Optional[RawRecord] = None) -> ContactDraft:
    org = org if org is not None else organization_of(entry)
    values: Dict[str, Any] = {}
    for field_name, accessors in CONTACT_ALIASES.items():
        normalize = CONTACT_NORMALIZERS.get(field_name, sanitize_string)
        values[field_name] = _first_present(accessors, entry, org, normalize)

    full_name = entry.get("full_name")
    if not values["first_name"] and isinstance(full_name, str) and full_name.strip():
        first, rest = split_name(full_name)
        values["first_name"] = first
        values["last_name"] = rest or values["last_name"]

    if not values["email"]:
        values["email"] = _first_present(SECONDARY_EMAIL_ALIASES, entry, org)

    if not values["job_title"]:
        values["job_title"] = _first_present(SECONDARY_JOB_TITLE_ALIASES, entry, org) or DEFAULT_JOB_TITLE

    return ContactDraft(**values)


def extract_company(entry: RawRecord, contact: ContactDraft, org: Optional[RawRecord] = None) -> CompanyDraft:
    org = org if org is not None else organization_of(entry)
    values: Dict[str, Any] = {}
    for field_name, accessors in COMPANY_ALIASES.items():
        normalize = COMPANY_NORMALIZERS.get(field_name, sanitize_string)
        values[field_name] = _first_present(accessors, entry, org, normalize)

    values["name"] = normalize_company_name(values["name"]) or None

    email_domain = normalize_domain(contact.email)
    if not values["name"] and email_domain and not any(h in email_domain for h in NAME_FALLBACK_FREE_MAIL):
        values["name"] = company_name_from_domain(email_domain)
        if not values["domain"]:
            values["domain"] = email_domain

    if not values["domain"]:
        values["domain"] = normalize_domain(values["website"]) or email_domain

    if not values["website"] and values["domain"]:
        values["website"] = f"https://{values['domain']}"

    if not values["company_size"]:
        values["company_size"] = _first_present(
            SECONDARY_COMPANY_SIZE_ALIASES, entry, org, parse_company_size
        )

    return CompanyDraft(**values)


def extract_record(entry: RawRecord) -> ExtractedRecord:
    """Map one raw ingestion record to canonical contact and company drafts."""
    if not isinstance(entry, Mapping):
        raise TypeError(f"Ingestion entry must be a JSON object, got {type(entry).__name__}")
    org = organization_of(entry)
    contact = extract_contact(entry, org)
    company = extract_company(entry, contact, org)
    return ExtractedRecord(contact=contact, company=company)
