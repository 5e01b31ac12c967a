from __future__ import annotations

import logging

from pipelines.runner import RunContext


logger = logging.getLogger(__name__)


class Reconcile:
    """Flushes whatever is left in the lead and company notification queues."""

    def run(self, ctx: RunContext) -> RunContext:
        dispatcher = ctx.dispatcher
        if dispatcher is None:
            return ctx
        if dispatcher.pending_leads or dispatcher.pending_companies:
            logger.info(
                "Sending final batches: %s leads, %s companies",
                len(dispatcher.pending_leads),
                len(dispatcher.pending_companies),
                extra={"step": "reconcile"},
            )
        dispatcher.flush_all()
        return ctx
