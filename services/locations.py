from __future__ import annotations

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple


LocationKind = Literal["city", "state", "country"]

TABLES_PATH = Path(__file__).resolve().parent / "data" / "locations_nl.json"

_ARTICLE_RE = re.compile(r"^(the\s+|het\s+|de\s+)", re.IGNORECASE)
# Keep word characters, whitespace, hyphen, apostrophe and Latin-1 diacritics
_DISALLOWED_RE = re.compile(r"[^\w\s\-'àáâãäåæçèéêëìíîïðñòóôõöøùúûüýþÿ]")
_WS_RE = re.compile(r"\s+")

_AAN_LINKERS = {"aan", "den", "der", "de", "het"}
_OP_LINKERS = {"op", "onder", "bij", "aan", "in"}


@lru_cache(maxsize=1)
def load_location_tables() -> Dict[str, Dict[str, str]]:
    """Static variant -> canonical Dutch display name tables, keyed by kind."""
    return json.loads(TABLES_PATH.read_text(encoding="utf-8"))


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def _title_case(text: str, keep_lower: frozenset = frozenset()) -> str:
    return " ".join(w if w in keep_lower else _capitalize(w) for w in text.split(" "))


def _squash(text: str) -> str:
    text = _DISALLOWED_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def _clean(value: Any) -> Optional[Tuple[str, str]]:
    """Return (cleaned, cleaned_without_leading_article) or None when absent."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().lower()
    if not text or text in ("null", "undefined"):
        return None
    full = _squash(text)
    stripped = _squash(_ARTICLE_RE.sub("", text))
    if not stripped:
        return None
    return full, stripped


def _city_fallback(city: str) -> str:
    if " aan " in city:
        return _title_case(city, frozenset(_AAN_LINKERS))
    if " op " in city or " onder " in city or " bij " in city:
        return _title_case(city, frozenset(_OP_LINKERS))
    return _title_case(city)


def normalize_location_dutch(value: Any, kind: LocationKind) -> Optional[str]:
    """Canonical Dutch display name for a country, state/province or city.

    Unknown values are title-cased; Dutch linking words in city names stay
    lower-case ("bergen op zoom" -> "Bergen op Zoom").
    """
    forms = _clean(value)
    if forms is None:
        return None
    full, cleaned = forms
    table = load_location_tables().get(kind, {})
    mapped = table.get(full) or table.get(cleaned)
    if mapped:
        return mapped
    if kind == "city":
        return _city_fallback(cleaned)
    return _title_case(cleaned)
