from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ContactDraft(BaseModel):
    """Candidate contact extracted from one raw ingestion record."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    job_title: str | None = None
    seniority: str | None = None
    linkedin_url: str | None = None
    mobile_phone: str | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None

    model_config = ConfigDict(extra="ignore")
