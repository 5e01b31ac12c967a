from __future__ import annotations

import json
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompanyRecord(BaseModel):
    """A stored company row as read back from the companies table."""

    id: int
    name: str
    domain: str | None = None
    website: str | None = None
    linkedin_url: str | None = None
    scraped_industry: str | None = None
    company_size: int | None = None
    company_phone: str | None = None
    company_technologies: List[str] = Field(default_factory=list, alias="technologies_json")
    country: str | None = None
    state: str | None = None
    city: str | None = None
    full_enrichment: bool = False
    company_summary: str | None = None
    created_at: str | None = None
    last_updated_at: str | None = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("company_technologies", mode="before")
    @classmethod
    def _decode_technologies(cls, value):
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return json.loads(value)
        return value
