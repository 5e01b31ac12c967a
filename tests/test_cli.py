from __future__ import annotations

import json
import sqlite3

import pytest

import cli


@pytest.fixture
def export_file(tmp_path):
    path = tmp_path / "export.jsonl"
    lines = [
        "# apollo export",
        json.dumps({"first_name": "Jane", "last_name": "Doe", "email": "jane@acme.io", "title": "CTO"}),
        json.dumps({"first_name": "Bob", "email": "bob@gmail.com"}),
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    monkeypatch.setenv("SKIP_WEBSITE_CHECK", "true")
    monkeypatch.setenv("INGEST_BATCH_DELAY_MS", "0")
    return str(tmp_path / "cli.db")


def test_bootstrap(db_path, capsys):
    assert cli.main(["--db", db_path, "bootstrap"]) == 0
    assert "Schema ready" in capsys.readouterr().out


def test_ingest_json_keeps_stdout_machine_readable(db_path, export_file, capsys):
    code = cli.main(["--db", db_path, "ingest", "--input", str(export_file), "--client-id", "acme-client", "--json"])
    captured = capsys.readouterr()

    assert code == 0
    assert json.loads(captured.out) == {
        "processed": 2,
        "contactsCreated": 1,
        "companiesCreated": 1,
        "duplicatesSkipped": 0,
        "filteredOut": 1,
        "message": (
            "Processed 2 entries: 1 contacts created, 1 companies created, 0 duplicates skipped, "
            "1 filtered out (no email/invalid website)"
        ),
    }
    assert "LEAD INGESTION - SUMMARY" in captured.err
    assert "Client: acme-client" in captured.err
    assert "invalid_email: 1" in captured.err


def test_ingest_prints_summary_to_stdout(db_path, export_file, capsys):
    assert cli.main(["--db", db_path, "ingest", "--input", str(export_file)]) == 0
    out = capsys.readouterr().out
    assert "LEAD INGESTION - SUMMARY" in out
    assert "Filtered Out: 1" in out


def test_ingest_missing_file_fails(db_path, tmp_path, capsys):
    code = cli.main(["--db", db_path, "ingest", "--input", str(tmp_path / "nope.jsonl")])
    assert code == 1
    assert "Ingestion failed" in capsys.readouterr().err


def test_ingest_requires_exactly_one_source(db_path):
    with pytest.raises(SystemExit):
        cli.main(["--db", db_path, "ingest"])


def test_report_lead_after_ingest(db_path, export_file, capsys):
    cli.main(["--db", db_path, "ingest", "--input", str(export_file)])
    capsys.readouterr()

    assert cli.main(["--db", db_path, "report-lead", "--email", "jane@acme.io"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["email"] == "jane@acme.io"
    assert report["domain"] == "acme.io"
    assert report["company_name"] == "Acme"
    assert "mobile_phone_type" in report

    assert cli.main(["--db", db_path, "report-lead", "--email", "ghost@acme.io"]) == 1


def test_apply_company_summaries_from_file(db_path, export_file, tmp_path, capsys):
    cli.main(["--db", db_path, "ingest", "--input", str(export_file)])
    conn = sqlite3.connect(db_path)
    (company_id,) = conn.execute("SELECT id FROM companies WHERE domain = 'acme.io'").fetchone()
    conn.close()

    summaries = tmp_path / "summaries.json"
    summaries.write_text(
        json.dumps({"companies": [{"company_id": company_id, "companySummary": "Acme builds rockets."}]}),
        encoding="utf-8",
    )
    capsys.readouterr()
    assert cli.main(["--db", db_path, "apply-company-summaries", "--input", str(summaries)]) == 0
    assert json.loads(capsys.readouterr().out)["updated"] == 1

    # Fully enriched companies are no longer offered to the backfill job
    assert cli.main(["--db", db_path, "notify-unsummarized-companies"]) == 0
    assert json.loads(capsys.readouterr().out)["companies_found"] == 0


def test_notify_unclassified_leads_without_webhook_configured(db_path, export_file, capsys):
    cli.main(["--db", db_path, "ingest", "--input", str(export_file)])
    capsys.readouterr()
    assert cli.main(["--db", db_path, "notify-unclassified-leads", "--limit", "10"]) == 0
    assert json.loads(capsys.readouterr().out)["leads_found"] == 1


def test_test_webhook_command(db_path, capsys):
    assert cli.main(["--db", db_path, "test-webhook", "--count", "3"]) == 0
    assert json.loads(capsys.readouterr().out)["success"] is True
