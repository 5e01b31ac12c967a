from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LeadRecord(BaseModel):
    """App/DB record shape for a marketplace lead."""

    id: int
    email: str
    company_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    job_title: str | None = None
    linkedin_url: str | None = None
    added_at: str
    last_updated_at: str

    model_config = ConfigDict(extra="ignore")
