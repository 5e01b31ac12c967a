from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional
from urllib.parse import urlparse

import tldextract


# Substring hints for free-mail providers; used where a domain must not become a company
FREE_MAIL_HINTS = ("gmail", "hotmail", "yahoo", "outlook")


def extract_domain(value: Any) -> Optional[str]:
    """Pull a bare host out of an email address, URL or domain-ish string.

    Returns None unless the result looks like a domain (has a dot, is longer
    than three characters and contains no spaces).
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().lower()
    if not text:
        return None

    if "@" in text and "://" not in text:
        parts = text.split("@")
        if len(parts) == 2:
            text = parts[1]

    if "://" in text:
        try:
            host = urlparse(text).hostname
        except ValueError:
            host = None
        if host:
            text = host
        else:
            text = text.split("://", 1)[1].split("/")[0] or text

    if text.startswith("www."):
        text = text[4:]

    if "." in text and len(text) > 3 and " " not in text:
        return text
    return None


def normalize_domain(value: Any) -> Optional[str]:
    domain = extract_domain(value)
    return domain.lower() if domain else None


def strip_domain(domain: Optional[str]) -> Optional[str]:
    """Store-side canonical form: no scheme, no leading www., no path."""
    if not domain:
        return None
    text = domain.strip().lower()
    for scheme in ("https://", "http://"):
        if text.startswith(scheme):
            text = text[len(scheme):]
            break
    if text.startswith("www."):
        text = text[4:]
    text = text.split("/")[0]
    return text or None


def is_free_mail_domain(domain: Optional[str]) -> bool:
    if not domain:
        return False
    return any(hint in domain for hint in FREE_MAIL_HINTS)


@lru_cache(maxsize=1)
def _extractor() -> tldextract.TLDExtract:
    # Bundled public-suffix snapshot only; never fetch the list over the network
    return tldextract.TLDExtract(suffix_list_urls=())


def company_name_from_domain(domain: Optional[str]) -> Optional[str]:
    """Best-effort display name from a domain: "buildrs.ai" -> "Buildrs"."""
    if not domain:
        return None
    label = domain.split(".")[0]
    ext = _extractor()(domain)
    if ext.domain and ext.suffix:
        label = ext.domain
    if not label:
        return None
    return label[:1].upper() + label[1:]
