from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from models.outcomes import SkipReason
from ports.reachability import ReachabilityChecker
from services.email_policy import is_valid_business_email
from services.extraction import ExtractedRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateResult:
    passed: bool
    reason: Optional[SkipReason] = None
    website: Optional[str] = None


class ValidationGate:
    """Ordered business checks; the first failing check decides the skip reason."""

    def __init__(self, checker: ReachabilityChecker) -> None:
        self.checker = checker

    def _website_ok(self, website: str) -> bool:
        try:
            return bool(self.checker.is_reachable(website))
        except Exception as e:
            logger.warning(
                "Website check raised; treating as invalid: %s",
                website,
                extra={"step": "validate", "reason": "invalid_website", "error": str(e)},
            )
            return False

    def evaluate(self, record: ExtractedRecord) -> GateResult:
        email = record.contact.email
        if not email or not email.strip():
            return GateResult(False, "no_email")

        if not is_valid_business_email(email):
            return GateResult(False, "invalid_email")

        company = record.company
        website = company.website or (f"https://{company.domain}" if company.domain else None)
        if not website:
            return GateResult(False, "no_website")

        if not self._website_ok(website):
            return GateResult(False, "invalid_website", website)

        return GateResult(True, None, website)
