from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class RunSummary(BaseModel):
    """Summary returned to the caller of one ingestion run."""

    processed: int = 0
    contacts_created: int = Field(default=0, alias="contactsCreated")
    companies_created: int = Field(default=0, alias="companiesCreated")
    duplicates_skipped: int = Field(default=0, alias="duplicatesSkipped")
    filtered_out: int = Field(default=0, alias="filteredOut")
    message: str = ""

    # Diagnostics only; not part of the wire result
    skip_reasons: Dict[str, int] = Field(default_factory=dict, exclude=True)
    duplicate_methods: Dict[str, int] = Field(default_factory=dict, exclude=True)
    permanently_failed: int = Field(default=0, exclude=True)

    model_config = ConfigDict(populate_by_name=True)

    def to_result(self) -> Dict[str, Any]:
        """Caller-facing camelCase result."""
        return self.model_dump(by_alias=True)
