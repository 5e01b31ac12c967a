from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple


_ABSENT_LITERALS = {"", "null", "undefined"}

_LEGAL_SUFFIX_RE = re.compile(r"\b(inc|ltd|llc|corp|bv|nv|gmbh|sa|sas|sarl)\b\.?$", re.IGNORECASE)
_TECH_SPLIT_RE = re.compile(r"[,;|\n]")


def _is_enabled_flag(flag: Any) -> bool:
    if isinstance(flag, bool):
        return flag
    return flag == "true" or (isinstance(flag, int) and flag == 1)


def sanitize_string(value: Any) -> Optional[str]:
    """Trim a loosely-typed value; empty, "null" and "undefined" are absent.

    Numbers become their string form; zero and booleans count as absent.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return None if cleaned in _ABSENT_LITERALS else cleaned
    if isinstance(value, (int, float)):
        if not value:
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return None


def title_case_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))


def normalize_company_name(name: Optional[str]) -> Optional[str]:
    """Strip a trailing legal-entity suffix and title-case each word.

    "acme holding bv" -> "Acme Holding"
    """
    if not name:
        return name
    stripped = _LEGAL_SUFFIX_RE.sub("", name)
    collapsed = re.sub(r"\s+", " ", stripped).strip()
    return " ".join(w[:1].upper() + w[1:].lower() for w in collapsed.split(" "))


def parse_company_technologies(value: Any) -> Optional[List[str]]:
    """Accept a list, a {name: flag} mapping or a delimited string of technologies."""
    if not value:
        return None
    if isinstance(value, (list, tuple)):
        techs = [t for t in (sanitize_string(v) for v in value) if t]
        return techs
    if isinstance(value, dict):
        techs = []
        for key, flag in value.items():
            if _is_enabled_flag(flag):
                name = sanitize_string(key)
                if name:
                    techs.append(name)
        return techs or None
    if isinstance(value, str):
        techs = []
        for token in _TECH_SPLIT_RE.split(value):
            cleaned = sanitize_string(token)
            if cleaned and len(cleaned) > 1:
                techs.append(cleaned)
        return techs or None
    return None


def split_name(full_name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    if not full_name:
        return None, None
    parts = [p for p in str(full_name).strip().split() if p]
    if not parts:
        return None, None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], " ".join(parts[1:])
