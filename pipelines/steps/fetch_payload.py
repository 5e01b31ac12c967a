from __future__ import annotations

import logging

from pipelines.errors import PayloadFetchError
from pipelines.runner import RunContext
from ports.fetcher import PayloadFetcher


logger = logging.getLogger(__name__)


class FetchPayload:
    def __init__(self, fetcher: PayloadFetcher) -> None:
        self.fetcher = fetcher

    def run(self, ctx: RunContext) -> RunContext:
        if not ctx.source:
            raise PayloadFetchError("No payload source given")
        ctx.raw_text = self.fetcher.fetch(ctx.source)
        logger.debug("Raw payload preview: %s", (ctx.raw_text or "")[:500], extra={"step": "fetch"})
        return ctx
