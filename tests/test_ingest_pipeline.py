from __future__ import annotations

import json
import sqlite3

import pytest

from conftest import StaticChecker
from db.repos.companies_repo import CompaniesRepo
from pipelines.errors import EmptyPayloadError, RunDeadlineExceeded
from pipelines.ingest_leads import build_entry_processor, run_lead_ingestion
from pipelines.runner import RunContext
from pipelines.steps import ProcessBatches, RetryFailures
from services.lead_writer import LeadWriter


class StaticFetcher:
    def __init__(self, text: str) -> None:
        self.text = text
        self.sources = []

    def fetch(self, source: str) -> str:
        self.sources.append(source)
        return self.text


def _jsonl(*entries) -> StaticFetcher:
    return StaticFetcher("\n".join(json.dumps(e) for e in entries))


def _run(conn, fetcher, sink, checker=None, **kwargs):
    kwargs.setdefault("batch_delay_ms", 0)
    return run_lead_ingestion(
        conn,
        "https://files.example/export.jsonl",
        "client-1",
        fetcher=fetcher,
        checker=checker or StaticChecker(),
        sink=sink,
        sleep=lambda s: None,
        **kwargs,
    )


JANE = {
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "Jane@Acme.io",
    "title": "CTO",
    "city": "amsterdam",
    "organization": {"name": "acme bv", "website_url": "https://www.acme.io", "estimated_num_employees": "11-50"},
}


def test_single_entry_creates_company_lead_and_notifications(conn, sink):
    summary = _run(conn, _jsonl(JANE), sink)

    assert (summary.processed, summary.contacts_created, summary.companies_created) == (1, 1, 1)
    assert (summary.duplicates_skipped, summary.filtered_out) == (0, 0)
    assert summary.message == (
        "Processed 1 entries: 1 contacts created, 1 companies created, 0 duplicates skipped, "
        "0 filtered out (no email/invalid website)"
    )

    lead = conn.execute("SELECT email, first_name, job_title, city, company_id FROM leads").fetchone()
    company = conn.execute("SELECT id, name, domain, company_size FROM companies").fetchone()
    assert lead == ("jane@acme.io", "Jane", "CTO", "Amsterdam", company[0])
    assert company[1:] == ("Acme", "acme.io", 31)

    (lead_payload,) = sink.payloads("leads")
    assert lead_payload["client_id"] == "client-1"
    assert lead_payload["job_titles"] == ["CTO"]
    (company_payload,) = sink.payloads("companies")
    assert company_payload["domains"] == ["acme.io"]
    assert company_payload["company_ids"] == [str(company[0])]


def test_result_uses_camel_case_keys(conn, sink):
    result = _run(conn, _jsonl(JANE), sink).to_result()
    assert set(result) == {"processed", "contactsCreated", "companiesCreated", "duplicatesSkipped", "filteredOut", "message"}


def test_free_mail_contact_is_filtered_without_writes(conn, sink):
    gmail = {"first_name": "Bob", "email": "bob@gmail.com", "organization": {"name": "Bobcorp"}}
    no_email = {"first_name": "Nobody", "organization": {"name": "Ghost", "website_url": "https://ghost.io"}}
    summary = _run(conn, _jsonl(gmail, no_email), sink)

    assert summary.filtered_out == 2
    assert summary.skip_reasons == {"invalid_email": 1, "no_email": 1}
    assert conn.execute("SELECT COUNT(*) FROM leads").fetchone()[0] == 0
    assert conn.execute("SELECT COUNT(*) FROM companies").fetchone()[0] == 0
    assert sink.sent == []


def test_unreachable_website_is_filtered(conn, sink):
    checker = StaticChecker(unreachable={"https://www.acme.io"})
    summary = _run(conn, _jsonl(JANE), sink, checker=checker)
    assert summary.skip_reasons == {"invalid_website": 1}
    assert checker.calls == ["https://www.acme.io"]


def test_rerun_counts_duplicates_and_sends_no_new_leads(conn, sink):
    _run(conn, _jsonl(JANE), sink)
    sink.sent.clear()

    summary = _run(conn, _jsonl(JANE, dict(JANE, email="jane@acme.io")), sink)
    assert summary.duplicates_skipped == 2
    assert summary.duplicate_methods == {"email": 2}
    assert summary.contacts_created == 0
    assert conn.execute("SELECT COUNT(*) FROM leads").fetchone()[0] == 1
    assert sink.payloads("leads") == []


def test_one_failing_entry_is_retried_without_stopping_the_batch(conn, sink, monkeypatch):
    entries = [
        {"first_name": f"P{i}", "email": f"p{i}@corp{i}.io", "title": f"Role {i}"} for i in range(1, 11)
    ]
    original = LeadWriter.upsert_lead
    failures = {"p5@corp5.io": 1}

    def flaky(self, contact, company_id):
        if failures.get(contact.email):
            failures[contact.email] -= 1
            raise RuntimeError("database is locked")
        return original(self, contact, company_id)

    monkeypatch.setattr(LeadWriter, "upsert_lead", flaky)
    summary = _run(conn, _jsonl(*entries), sink, batch_size=3)

    assert summary.processed == 10
    assert summary.contacts_created == 10
    assert summary.permanently_failed == 0
    assert conn.execute("SELECT COUNT(*) FROM leads").fetchone()[0] == 10
    (payload,) = sink.payloads("leads")
    assert payload["leads_in_batch"] == 10
    assert "Role 5" in payload["job_titles"]


def test_non_object_lines_are_filtered_as_missing_email(conn, sink):
    fetcher = StaticFetcher('[{"email": "a@b.io"}]\n' + json.dumps(JANE))
    summary = _run(conn, fetcher, sink)
    assert (summary.processed, summary.contacts_created, summary.filtered_out) == (2, 1, 1)
    assert summary.skip_reasons == {"no_email": 1}
    assert summary.permanently_failed == 0


def test_entry_that_fails_twice_is_reported_as_permanent(conn, sink, monkeypatch):
    original = CompaniesRepo.create_company

    def broken_for_beta(self, draft):
        if draft.domain == "beta.io":
            raise sqlite3.OperationalError("disk I/O error")
        return original(self, draft)

    monkeypatch.setattr(CompaniesRepo, "create_company", broken_for_beta)
    beta = {"first_name": "Bo", "email": "bo@beta.io"}
    summary = _run(conn, _jsonl(beta, JANE), sink)

    assert summary.processed == 1
    assert summary.contacts_created == 1
    assert summary.permanently_failed == 1
    assert conn.execute("SELECT email FROM leads").fetchall() == [("jane@acme.io",)]


def test_company_creation_failure_is_isolated_then_recovered_on_retry(conn, monkeypatch):
    entries = [{"first_name": f"P{i}", "email": f"p{i}@corp{i}.io"} for i in range(1, 11)]
    original = CompaniesRepo.create_company
    failures = {"corp5.io": 1}

    def flaky(self, draft):
        if failures.get(draft.domain):
            failures[draft.domain] -= 1
            raise sqlite3.OperationalError("database is locked")
        return original(self, draft)

    monkeypatch.setattr(CompaniesRepo, "create_company", flaky)
    processor = build_entry_processor(conn, StaticChecker())
    ctx = RunContext(entries=entries)

    ctx = ProcessBatches(processor, batch_size=3, batch_delay_ms=0).run(ctx)
    assert ctx.stats.contacts_created == 9
    assert [f.entry["email"] for f in ctx.failures] == ["p5@corp5.io"]
    assert ctx.failures[0].batch_number == 2
    assert "database is locked" in ctx.failures[0].error

    ctx = RetryFailures(processor).run(ctx)
    assert ctx.stats.contacts_created == 10
    assert ctx.stats.companies_created == 10
    assert ctx.stats.processed == 10
    assert ctx.stats.permanently_failed == []


def test_minimal_export_line_creates_company_and_lead(conn, sink):
    line = '{"email":"jane@acme.io","first_name":"Jane","last_name":"Doe","organization":{"website":"https://acme.io"}}'
    checker = StaticChecker()
    result = _run(conn, StaticFetcher(line + "\n"), sink, checker=checker).to_result()

    assert {k: v for k, v in result.items() if k != "message"} == {
        "processed": 1,
        "contactsCreated": 1,
        "companiesCreated": 1,
        "duplicatesSkipped": 0,
        "filteredOut": 0,
    }
    assert checker.calls == ["https://acme.io"]
    (company_id, domain) = conn.execute("SELECT id, domain FROM companies").fetchone()
    assert domain == "acme.io"
    assert conn.execute("SELECT email, company_id FROM leads").fetchall() == [("jane@acme.io", company_id)]


def test_failing_sink_does_not_abort_the_run(conn):
    class FailingSink:
        def send(self, channel, payload):
            raise RuntimeError("sink down")

    entries = [{"first_name": f"P{i}", "email": f"p{i}@corp{i}.io"} for i in range(3)]
    summary = _run(conn, _jsonl(*entries), FailingSink())
    assert (summary.processed, summary.contacts_created) == (3, 3)
    assert conn.execute("SELECT COUNT(*) FROM leads").fetchone()[0] == 3



def test_deadline_stops_run_and_flushes_partial_notifications(conn, sink):
    entries = [{"first_name": f"P{i}", "email": f"p{i}@corp{i}.io"} for i in range(5)]
    now = {"t": 0.0}

    def sleep(seconds):
        now["t"] += 10

    with pytest.raises(RunDeadlineExceeded) as exc:
        run_lead_ingestion(
            conn,
            "https://files.example/export.jsonl",
            "client-1",
            fetcher=_jsonl(*entries),
            checker=StaticChecker(),
            sink=sink,
            batch_size=2,
            batch_delay_ms=100,
            deadline_seconds=5,
            sleep=sleep,
            clock=lambda: now["t"],
        )

    assert exc.value.summary is not None
    assert exc.value.summary.processed == 2
    assert conn.execute("SELECT COUNT(*) FROM leads").fetchone()[0] == 2
    (payload,) = sink.payloads("leads")
    assert payload["leads_in_batch"] == 2
    assert len(sink.payloads("companies")) == 1


def test_batches_pause_between_but_not_after_the_last(conn, sink):
    entries = [{"first_name": f"P{i}", "email": f"p{i}@corp{i}.io"} for i in range(5)]
    pauses = []
    run_lead_ingestion(
        conn,
        "https://files.example/export.jsonl",
        fetcher=_jsonl(*entries),
        checker=StaticChecker(),
        sink=sink,
        batch_size=2,
        batch_delay_ms=250,
        sleep=pauses.append,
    )
    assert pauses == [0.25, 0.25]


def test_empty_payload_aborts_before_processing(conn, sink):
    with pytest.raises(EmptyPayloadError):
        _run(conn, StaticFetcher("nothing here\n"), sink)
    assert sink.sent == []
