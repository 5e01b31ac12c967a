from __future__ import annotations

from pydantic import BaseModel, ConfigDict


# Placeholder name for companies created without one
UNKNOWN_COMPANY = "Unknown Company"


class CompanyDraft(BaseModel):
    """Candidate company extracted from one raw ingestion record."""

    name: str | None = None
    domain: str | None = None
    website: str | None = None
    linkedin_url: str | None = None
    scraped_industry: str | None = None
    company_size: int | None = None
    company_phone: str | None = None
    company_technologies: list[str] | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None

    model_config = ConfigDict(extra="ignore")
