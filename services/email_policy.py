from __future__ import annotations

from typing import Optional


CONSUMER_DOMAINS = frozenset(
    {
        "gmail.com",
        "hotmail.com",
        "yahoo.com",
        "outlook.com",
        "icloud.com",
        "aol.com",
        "live.com",
        "msn.com",
        "protonmail.com",
    }
)

DISPOSABLE_DOMAINS = frozenset(
    {
        "10minutemail.com",
        "tempmail.org",
        "guerrillamail.com",
        "mailinator.com",
        "yopmail.com",
        "temp-mail.org",
    }
)


def email_domain(email: Optional[str]) -> Optional[str]:
    if not email or "@" not in email:
        return None
    parts = email.split("@")
    domain = parts[1].strip().lower() if len(parts) > 1 else ""
    return domain or None


def is_valid_business_email(email: Optional[str]) -> bool:
    """True for a work address: not a consumer mailbox and not a throwaway inbox."""
    domain = email_domain(email)
    if not domain:
        return False
    return domain not in CONSUMER_DOMAINS and domain not in DISPOSABLE_DOMAINS
