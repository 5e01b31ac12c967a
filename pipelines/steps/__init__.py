# Namespace for pipeline steps
from .fetch_payload import FetchPayload  # noqa: F401
from .parse_entries import ParseEntries  # noqa: F401
from .process_entries import ProcessBatches, RetryFailures  # noqa: F401
from .reconcile import Reconcile  # noqa: F401
