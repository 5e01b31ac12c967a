from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


EntryAction = Literal["created", "duplicate", "skipped"]
SkipReason = Literal["no_email", "invalid_email", "no_website", "invalid_website"]
DuplicateMethod = Literal["email", "linkedin", "name_company"]
CompanyTier = Literal["email_domain", "scraped_domain", "name_only"]


class DuplicateMatch(BaseModel):
    found: bool
    method: DuplicateMethod | None = None
    existing_id: int | None = None


class CompanyResolution(BaseModel):
    """Result of the company fallback chain; company_id None means no tier applied."""

    company_id: int | None = None
    created: bool = False
    tier: CompanyTier | None = None
    domain: str | None = None


class EntryOutcome(BaseModel):
    """Terminal outcome for one ingestion entry (errors are raised, not returned)."""

    action: EntryAction
    reason: SkipReason | None = None
    duplicate_method: DuplicateMethod | None = None
    existing_id: int | None = None

    lead_id: int | None = None
    lead_created: bool = False
    company_id: int | None = None
    company_domain: str | None = None
    company_created: bool = False
    job_title: str | None = None

    model_config = ConfigDict(extra="forbid")
