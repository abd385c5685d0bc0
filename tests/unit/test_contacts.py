"""
tests/unit/test_contacts.py

People-search client with a mocked requests session.
"""
from unittest.mock import MagicMock

import pytest
import requests

from ats_matcher.config import ContactSearchSettings
from ats_matcher.contacts import (
    NOT_AVAILABLE,
    RESULTS_PER_PAGE,
    TARGET_TITLES,
    ContactQuery,
    ContactSearchClient,
    build_search_payload,
    parse_person,
)
from ats_matcher.errors import ConfigurationError, ContactSearchError

SETTINGS = ContactSearchSettings(api_key="apollo-test", base_url="https://apollo.example/v1/")

PERSON = {
    "name": "Sam Lee",
    "title": "Senior Recruiter",
    "email": "sam@acme.example",
    "city": "Austin",
    "state": "Texas",
    "country": "United States",
    "linkedin_url": "https://linkedin.com/in/samlee",
    "organization": {"name": "Acme Corp"},
    "phone_numbers": [{"sanitized_number": "+15550100"}],
}


def _response(status=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = text
    response.json.return_value = payload if payload is not None else {}
    return response


def _client(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return ContactSearchClient(SETTINGS, session=session), session


# ------------------------------------------------------------------
# Payload and parsing
# ------------------------------------------------------------------

def test_payload_with_all_filters():
    payload = build_search_payload(
        ContactQuery(company_name="Acme", country="Germany", job_title="Data Engineer")
    )
    assert payload == {
        "page": 1,
        "per_page": RESULTS_PER_PAGE,
        "person_titles": list(TARGET_TITLES),
        "organization_names": ["Acme"],
        "person_locations": ["Germany"],
        "q_keywords": "Data Engineer",
    }


def test_payload_without_optional_filters():
    payload = build_search_payload(ContactQuery(company_name="Acme"))
    assert "person_locations" not in payload
    assert "q_keywords" not in payload


def test_parse_full_person():
    contact = parse_person(PERSON, "Acme")
    assert contact.name == "Sam Lee"
    assert contact.company == "Acme Corp"
    assert contact.phone == "+15550100"
    assert contact.location == "Austin, Texas"
    assert contact.linkedin_url == "https://linkedin.com/in/samlee"


def test_parse_sparse_person_uses_fallbacks():
    contact = parse_person({"name": "Ana", "country": "Spain", "phone_numbers": []}, "Acme")
    assert contact.title == NOT_AVAILABLE
    assert contact.company == "Acme"
    assert contact.email == NOT_AVAILABLE
    assert contact.phone == NOT_AVAILABLE
    assert contact.location == "Spain"
    assert contact.linkedin_url is None


def test_parse_empty_person():
    contact = parse_person({})
    assert contact.name == NOT_AVAILABLE
    assert contact.company == NOT_AVAILABLE
    assert contact.location == NOT_AVAILABLE


def test_contact_serializes_camel_case():
    dumped = parse_person(PERSON).model_dump(by_alias=True)
    assert dumped["linkedinUrl"] == "https://linkedin.com/in/samlee"


# ------------------------------------------------------------------
# Client
# ------------------------------------------------------------------

def test_client_requires_key():
    with pytest.raises(ConfigurationError):
        ContactSearchClient(ContactSearchSettings())


def test_search_success():
    client, session = _client(_response(payload={"people": [PERSON, "junk", {"name": "Ana"}]}))

    contacts = client.search(ContactQuery(company_name="Acme", country="United States"))

    assert [contact.name for contact in contacts] == ["Sam Lee", "Ana"]
    assert contacts[1].company == "Acme"

    args, kwargs = session.post.call_args
    assert args[0] == "https://apollo.example/v1/mixed_people/search"
    assert kwargs["headers"]["X-Api-Key"] == "apollo-test"
    assert kwargs["json"]["organization_names"] == ["Acme"]
    assert kwargs["timeout"] == SETTINGS.timeout_seconds


def test_search_with_no_people():
    client, _ = _client(_response(payload={"people": None}))
    assert client.search(ContactQuery(company_name="Acme")) == []


@pytest.mark.parametrize("status", [401, 429, 500])
def test_search_http_errors(status):
    client, _ = _client(_response(status=status, text="upstream says no"))

    with pytest.raises(ContactSearchError) as excinfo:
        client.search(ContactQuery(company_name="Acme"))

    assert excinfo.value.status_code == status


def test_search_network_error():
    client, _ = _client(error=requests.ConnectionError("unreachable"))
    with pytest.raises(ContactSearchError):
        client.search(ContactQuery(company_name="Acme"))


def test_search_invalid_json():
    response = _response()
    response.json.side_effect = ValueError("not json")
    client, _ = _client(response)

    with pytest.raises(ContactSearchError, match="invalid JSON"):
        client.search(ContactQuery(company_name="Acme"))
