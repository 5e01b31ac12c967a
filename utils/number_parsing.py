from __future__ import annotations

import re
from typing import Any, Optional, Union


Number = Union[int, float]

_UNIT_RES = (re.compile(r"employees?"), re.compile(r"people"), re.compile(r"staff"))
_NON_NUMERIC_RE = re.compile(r"[^\d\-+]")
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?")


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def parse_number(value: Any) -> Optional[Number]:
    """Parse headcount-style values: '51-200 employees' -> 126, '1,000+' -> 1000.

    Returns None for unparsable inputs.
    """
    if value is None or isinstance(value, bool) or value == "":
        return None
    if isinstance(value, (int, float)):
        return None if value != value else value
    if not isinstance(value, str):
        return None

    cleaned = value.lower()
    for unit_re in _UNIT_RES:
        cleaned = unit_re.sub("", cleaned, count=1)
    cleaned = _NON_NUMERIC_RE.sub("", cleaned)

    if "-" in cleaned:
        parts = []
        for piece in cleaned.split("-"):
            m = re.match(r"^[+]?\d+", piece)
            if m:
                parts.append(int(m.group(0)))
        if len(parts) == 2:
            return _round_half_up((parts[0] + parts[1]) / 2)

    m = _FLOAT_PREFIX_RE.match(cleaned)
    if not m:
        return None
    number = float(m.group(0))
    return int(number) if number.is_integer() else number


def parse_company_size(value: Any) -> Optional[int]:
    """Whole-number company size for storage."""
    parsed = parse_number(value)
    if parsed is None:
        return None
    return _round_half_up(parsed)
