from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional

from pipelines.errors import EmptyPayloadError
from pipelines.runner import RunContext


logger = logging.getLogger(__name__)

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_BARE_KEY_RE = re.compile(r"([{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)\s*:")


def repair_json_line(line: str) -> str:
    """Best-effort fix for hand-edited exports: drop trailing commas and quote bare keys."""
    fixed = _TRAILING_COMMA_RE.sub(r"\1", line)
    return _BARE_KEY_RE.sub(r'\1"\2":', fixed)


def parse_line(line: str, line_number: int) -> Optional[Any]:
    try:
        return json.loads(line)
    except json.JSONDecodeError as first_error:
        try:
            parsed = json.loads(repair_json_line(line))
        except json.JSONDecodeError as second_error:
            logger.warning(
                "Could not parse line %s, skipping: %s",
                line_number,
                line[:100],
                extra={"step": "parse", "error": f"{first_error}; after repair: {second_error}"},
            )
            return None
        logger.info("Repaired and parsed line %s", line_number, extra={"step": "parse"})
        return parsed


def parse_lines(raw: str) -> List[Any]:
    entries: List[Any] = []
    for i, raw_line in enumerate(raw.split("\n"), start=1):
        line = raw_line.strip()
        if not line:
            continue
        # Headers, comments and other non-JSON lines
        if not line.startswith("{") and not line.startswith("["):
            logger.debug("Skipping non-JSON line %s: %s", i, line[:100], extra={"step": "parse"})
            continue
        parsed = parse_line(line, i)
        if parsed is not None:
            entries.append(parsed)
    return entries


class ParseEntries:
    def run(self, ctx: RunContext) -> RunContext:
        ctx.entries = parse_lines(ctx.raw_text or "")
        if not ctx.entries:
            raise EmptyPayloadError("No valid JSON entries found in JSONL file. Please check the file format.")
        logger.info("Found %s valid entries to process", len(ctx.entries), extra={"step": "parse"})
        return ctx
