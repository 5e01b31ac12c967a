from __future__ import annotations

from typing import Protocol


class PayloadFetcher(Protocol):
    def fetch(self, source: str) -> str:
        """Return the raw newline-delimited JSON text; raise PayloadFetchError on failure."""
        ...
