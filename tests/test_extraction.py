from __future__ import annotations

import pytest

from services.extraction import extract_record


def test_extracts_contact_and_company_from_nested_organization():
    entry = {
        "first_name": " Jane ",
        "last_name": "Doe",
        "email": "Jane@Acme.io",
        "title": "Head of Sales",
        "linkedin_url": "https://www.linkedin.com/in/janedoe",
        "mobile_phone": "06 1234 5678",
        "city": "amsterdam",
        "organization": {
            "name": "acme holding bv",
            "website_url": "https://www.acme.io",
            "estimated_num_employees": "51-200",
            "technologies": ["Salesforce", "Slack"],
            "phone": "020 123 4567",
            "country": "the netherlands",
        },
    }

    record = extract_record(entry)

    assert record.contact.first_name == "Jane"
    assert record.contact.last_name == "Doe"
    assert record.contact.email == "Jane@Acme.io"
    assert record.contact.job_title == "Head of Sales"
    assert record.contact.mobile_phone == "+31612345678"
    assert record.contact.city == "Amsterdam"
    # Contact location falls back to the organization
    assert record.contact.country == "Nederland"

    assert record.company.name == "Acme Holding"
    assert record.company.domain == "acme.io"
    assert record.company.website == "https://www.acme.io"
    assert record.company.company_size == 126
    assert record.company.company_technologies == ["Salesforce", "Slack"]
    assert record.company.company_phone == "+31201234567"
    assert record.email_domain == "acme.io"


def test_alias_order_prefers_earlier_keys():
    entry = {"firstName": "Camel", "first_name": "Snake", "email_address": "a@b.io", "email": "first@acme.io"}
    record = extract_record(entry)
    assert record.contact.first_name == "Snake"
    assert record.contact.email == "first@acme.io"


def test_blank_alias_falls_through_to_next_present_value():
    entry = {"first_name": "   ", "firstName": "Jane", "email": "null", "work_email": "jane@acme.io"}
    record = extract_record(entry)
    assert record.contact.first_name == "Jane"
    assert record.contact.email == "jane@acme.io"


def test_name_and_full_name_fallbacks():
    assert extract_record({"name": "Ada Lovelace King"}).contact.last_name == "Lovelace King"
    record = extract_record({"full_name": "Grace Brewster Hopper"})
    assert record.contact.first_name == "Grace"
    assert record.contact.last_name == "Brewster Hopper"


def test_secondary_email_and_job_title_fallbacks():
    record = extract_record({"personal_email": "ada@analytical.io", "current_position": "Engineer"})
    assert record.contact.email == "ada@analytical.io"
    assert record.contact.job_title == "Engineer"
    assert extract_record({"email": "x@acme.io"}).contact.job_title == "Professional"


def test_company_fallbacks_from_email_domain():
    record = extract_record({"email": "jane@buildrs.ai"})
    assert record.company.name == "Buildrs"
    assert record.company.domain == "buildrs.ai"
    assert record.company.website == "https://buildrs.ai"


def test_free_mail_domain_does_not_become_company_name():
    record = extract_record({"email": "jane@gmail.com"})
    assert record.company.name is None
    # Domain and website still fall back to the email domain
    assert record.company.domain == "gmail.com"
    assert record.company.website == "https://gmail.com"


def test_non_dict_company_value_is_treated_as_top_level_name():
    record = extract_record({"email": "jane@acme.io", "company": "Acme BV", "website": "acme.io"})
    assert record.company.name == "Acme"
    assert record.company.website == "acme.io"
    assert record.company.domain == "acme.io"


def test_headcount_retry_when_size_missing():
    record = extract_record({"email": "a@acme.io", "company_headcount": "1,000+"})
    assert record.company.company_size == 1000


def test_non_object_entry_raises():
    with pytest.raises(TypeError):
        extract_record(["not", "an", "object"])
