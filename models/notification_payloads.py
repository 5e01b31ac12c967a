from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict


class LeadBatchPayload(BaseModel):
    """Wire shape of a lead-batch webhook."""

    type: Literal["apollo_batch_processed"] = "apollo_batch_processed"
    batch_number: int
    leads_in_batch: int
    client_id: str
    timestamp: int
    lead_ids: List[str]
    job_titles: List[str]
    message: str

    model_config = ConfigDict(extra="forbid")


class CompanyBatchPayload(BaseModel):
    """Wire shape of a company-batch webhook."""

    type: Literal["company_batch_processed"] = "company_batch_processed"
    batch_number: int
    companies_in_batch: int
    client_id: str
    timestamp: int
    domains: List[str]
    company_ids: List[str]
    message: str

    model_config = ConfigDict(extra="forbid")
