from __future__ import annotations

from conftest import StaticChecker
from services.extraction import extract_record
from services.validation_gate import ValidationGate


def _evaluate(entry, checker=None):
    return ValidationGate(checker or StaticChecker()).evaluate(extract_record(entry))


def test_reason_codes_in_check_order():
    assert _evaluate({"first_name": "No", "last_name": "Mail"}).reason == "no_email"
    assert _evaluate({"email": "   "}).reason == "no_email"
    assert _evaluate({"email": "bob@gmail.com", "website": "https://bob.dev"}).reason == "invalid_email"
    assert _evaluate({"email": "ops@mailinator.com"}).reason == "invalid_email"


def test_no_website_when_nothing_to_fall_back_on():
    # An email without a parsable domain passes the "@" check but leaves no website to check
    verdict = _evaluate({"email": "jane@localhost"})
    assert verdict.passed is False
    assert verdict.reason == "no_website"


def test_invalid_website_from_checker():
    checker = StaticChecker(unreachable={"https://acme.io"})
    verdict = _evaluate({"email": "jane@acme.io"}, checker)
    assert verdict.reason == "invalid_website"
    assert checker.calls == ["https://acme.io"]


def test_checker_exception_counts_as_invalid_website():
    class Exploding:
        def is_reachable(self, url):
            raise RuntimeError("dns failure")

    verdict = ValidationGate(Exploding()).evaluate(extract_record({"email": "jane@acme.io"}))
    assert verdict.reason == "invalid_website"


def test_passes_with_reachable_website():
    verdict = _evaluate({"email": "jane@acme.io", "organization": {"website_url": "https://www.acme.io"}})
    assert verdict.passed is True
    assert verdict.reason is None
    assert verdict.website == "https://www.acme.io"
