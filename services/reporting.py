from __future__ import annotations

from functools import partial
from typing import Optional, TextIO

from models.run_summary import RunSummary


def print_summary(
    summary: RunSummary,
    source: Optional[str] = None,
    client_id: Optional[str] = None,
    out: Optional[TextIO] = None,
) -> None:
    """Print summary of an ingestion run (to stdout unless `out` is given)."""
    emit = partial(print, file=out)
    emit("\n" + "="*60)
    emit("LEAD INGESTION - SUMMARY")
    emit("="*60)
    emit(f"Source: {source or 'N/A'}")
    emit(f"Client: {client_id or 'N/A'}")
    emit()
    emit("Run Statistics:")
    emit(f"  Processed: {summary.processed}")
    emit(f"  Contacts Created: {summary.contacts_created}")
    emit(f"  Companies Created: {summary.companies_created}")
    emit(f"  Duplicates Skipped: {summary.duplicates_skipped}")
    emit(f"  Filtered Out: {summary.filtered_out}")
    if summary.permanently_failed:
        emit(f"  Permanently Failed: {summary.permanently_failed}")
    if summary.skip_reasons:
        emit()
        emit("Skip Reasons:")
        for reason, count in sorted(summary.skip_reasons.items()):
            emit(f"  {reason}: {count}")
    if summary.duplicate_methods:
        emit()
        emit("Duplicate Matches:")
        for method, count in sorted(summary.duplicate_methods.items()):
            emit(f"  {method}: {count}")
    emit()
    emit(summary.message)
    emit("="*60)
