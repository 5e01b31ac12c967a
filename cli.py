import argparse
import json
import sys
from pathlib import Path

from config.settings import get_settings
from db import schema
from db.connection import get_connection
from db.repos.leads_repo import LeadsRepo
from pipelines.backfill import apply_company_summaries, notify_unclassified_leads, notify_unsummarized_companies
from pipelines.errors import IngestionError, RunDeadlineExceeded
from pipelines.ingest_leads import run_lead_ingestion
from services.notifications import WebhookNotificationSink, send_test_batches
from services.payload_fetch import FilePayloadFetcher, HttpPayloadFetcher
from services.phone_utils import classify_phone
from services.reporting import print_summary
from utils.logging_setup import init_logging


def _open_db(args):
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    return conn


def cmd_bootstrap(args):
    _open_db(args)
    print("Schema ready")
    return 0


def cmd_ingest(args):
    conn = _open_db(args)
    settings = get_settings()
    client_id = args.client_id or settings.default_client_id
    if args.input:
        source, fetcher = args.input, FilePayloadFetcher()
    else:
        source, fetcher = args.url, HttpPayloadFetcher()

    try:
        summary = run_lead_ingestion(
            conn,
            source,
            client_id,
            fetcher=fetcher,
            batch_size=args.batch_size,
            batch_delay_ms=args.delay_ms,
        )
    except RunDeadlineExceeded as e:
        if e.summary is not None:
            print_summary(e.summary, source, client_id, out=sys.stderr if args.json else None)
        print(f"Stopped early: {e}", file=sys.stderr)
        return 2
    except IngestionError as e:
        print(f"Ingestion failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        # Keep stdout pure JSON
        print_summary(summary, source, client_id, out=sys.stderr)
        print(json.dumps(summary.to_result(), indent=2, ensure_ascii=False))
    else:
        print_summary(summary, source, client_id)
    return 0


def cmd_report_lead(args):
    conn = _open_db(args)
    result = LeadsRepo(conn).get_lead_with_company(args.email)
    if not result:
        print("No lead found for email")
        return 1
    phone = classify_phone(result.get("mobile_phone"), result.get("country"))
    result["mobile_phone_type"] = phone.type
    result["mobile_phone_confidence"] = phone.confidence
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def cmd_notify_unclassified_leads(args):
    conn = _open_db(args)
    result = notify_unclassified_leads(conn, WebhookNotificationSink(), limit=args.limit)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def cmd_notify_unsummarized_companies(args):
    conn = _open_db(args)
    result = notify_unsummarized_companies(conn, WebhookNotificationSink(), limit=args.limit)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def cmd_apply_company_summaries(args):
    conn = _open_db(args)
    data = json.loads(Path(args.input).read_text(encoding="utf-8"))
    items = data.get("companies") if isinstance(data, dict) else data
    result = apply_company_summaries(conn, items or [])
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result["failed"] == 0 else 1


def cmd_test_webhook(args):
    settings = get_settings()
    result = send_test_batches(WebhookNotificationSink(), args.client_id or settings.default_client_id, count=args.count)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


def build_parser():
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Lead ingestion CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_ing = sub.add_parser("ingest", help="Ingest a newline-delimited JSON lead export")
    src = p_ing.add_mutually_exclusive_group(required=True)
    src.add_argument("--url", help="HTTP(S) URL of the export")
    src.add_argument("--input", help="Path to a local export file")
    p_ing.add_argument("--client-id", default=None, help="Client id reported in notifications")
    p_ing.add_argument("--batch-size", type=int, default=None, help=f"Entries per batch (default: {settings.ingest_batch_size})")
    p_ing.add_argument("--delay-ms", type=int, default=None, help=f"Pause between batches (default: {settings.ingest_batch_delay_ms})")
    p_ing.add_argument("--json", action="store_true", help="Also print the run result as JSON")
    p_ing.set_defaults(func=cmd_ingest)

    p_rl = sub.add_parser("report-lead", help="Show joined lead+company for an email")
    p_rl.add_argument("--email", required=True)
    p_rl.set_defaults(func=cmd_report_lead)

    p_nl = sub.add_parser("notify-unclassified-leads", help="Send leads without function group in one batch")
    p_nl.add_argument("--limit", type=int, default=None, help="Max leads (capped at 500)")
    p_nl.set_defaults(func=cmd_notify_unclassified_leads)

    p_nc = sub.add_parser("notify-unsummarized-companies", help="Send companies without summary in one batch")
    p_nc.add_argument("--limit", type=int, default=None, help="Max companies (capped at 500)")
    p_nc.set_defaults(func=cmd_notify_unsummarized_companies)

    p_ac = sub.add_parser("apply-company-summaries", help="Store company summaries from a JSON file")
    p_ac.add_argument("--input", required=True, help="JSON array (or {companies: [...]}) of summary items")
    p_ac.set_defaults(func=cmd_apply_company_summaries)

    p_tw = sub.add_parser("test-webhook", help="Send synthetic lead batches to the lead webhook")
    p_tw.add_argument("--count", type=int, default=12)
    p_tw.add_argument("--client-id", default=None)
    p_tw.set_defaults(func=cmd_test_webhook)

    return parser


def main(argv=None):
    settings = get_settings()
    init_logging(settings.log_level)
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
