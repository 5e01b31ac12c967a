from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Literal, Optional


_SEPARATORS_RE = re.compile(r"[\s().\-]")
_INTL_RE = re.compile(r"^\+\d{10,15}$")


def normalize_phone(value: Any) -> Optional[str]:
    """Normalize a phone number to E.164-ish form with a Dutch-market default.

    "0612345678" -> "+31612345678", "0031 20 123 4567" -> "+31201234567".
    """
    if value is None or isinstance(value, bool) or value == "" or value == 0:
        return None
    phone = _SEPARATORS_RE.sub("", str(value))

    if phone.startswith("00"):
        return "+" + phone[2:]
    if phone.startswith("+"):
        return phone
    if phone.startswith("31") and len(phone) >= 10:
        return "+" + phone
    if phone.startswith("0") and len(phone) >= 9:
        return "+31" + phone[1:]
    return phone if len(phone) >= 8 else None


PhoneType = Literal["mobile", "landline"]


@dataclass(frozen=True)
class PhoneClassification:
    type: PhoneType
    confidence: float


def classify_phone(phone: Optional[str], country: Optional[str]) -> PhoneClassification:
    """Guess mobile vs landline from a normalized number and a Dutch country name."""
    if not phone:
        return PhoneClassification("landline", 0.0)

    if country == "Nederland":
        if phone.startswith("+316"):
            return PhoneClassification("mobile", 0.95)
        if re.match(r"^\+31[2-7]", phone):
            return PhoneClassification("landline", 0.90)

    if country == "België":
        if phone.startswith("+324"):
            return PhoneClassification("mobile", 0.95)
        if re.match(r"^\+32[1-9]", phone):
            return PhoneClassification("landline", 0.85)

    if _INTL_RE.match(phone):
        if len(phone) > 12:
            return PhoneClassification("mobile", 0.70)
        return PhoneClassification("landline", 0.60)

    return PhoneClassification("landline", 0.50)
