"""
Recruiter Contact Search.

Looks up recruiters, founders and executives at a company through the
Apollo people-search API.
"""

import logging
import time
from typing import Any, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ats_matcher.config import ContactSearchSettings
from ats_matcher.errors import ConfigurationError, ContactSearchError

logger = logging.getLogger("ats_matcher.contacts")

NOT_AVAILABLE = "N/A"
RESULTS_PER_PAGE = 10

# * People worth contacting about an opening
TARGET_TITLES = (
    "Recruiter",
    "Talent Acquisition",
    "HR Manager",
    "Hiring Manager",
    "Founder",
    "Co-Founder",
    "CEO",
    "Chief Executive Officer",
    "VP",
    "Vice President",
    "Head of Talent",
    "Head of HR",
)


class ContactQuery(BaseModel):
    """Search criteria."""

    company_name: str = Field(..., min_length=1)
    country: Optional[str] = None
    job_title: Optional[str] = None


class Contact(BaseModel):
    """A person found by the search. Unknown fields hold "N/A"."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    name: str = NOT_AVAILABLE
    title: str = NOT_AVAILABLE
    company: str = NOT_AVAILABLE
    email: str = NOT_AVAILABLE
    phone: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE
    linkedin_url: Optional[str] = None


def build_search_payload(query: ContactQuery) -> dict[str, Any]:
    """Build the people-search request body."""
    payload: dict[str, Any] = {
        "page": 1,
        "per_page": RESULTS_PER_PAGE,
        "person_titles": list(TARGET_TITLES),
    }
    if query.company_name:
        payload["organization_names"] = [query.company_name]
    if query.country:
        payload["person_locations"] = [query.country]
    if query.job_title:
        payload["q_keywords"] = query.job_title
    return payload


def _format_location(person: dict[str, Any]) -> str:
    city = person.get("city")
    state = person.get("state")
    if city and state:
        return f"{city}, {state}"
    return person.get("country") or NOT_AVAILABLE


def parse_person(person: dict[str, Any], fallback_company: Optional[str] = None) -> Contact:
    """
    Convert one people-search record into a Contact.

    Args:
        person: Raw record from the API.
        fallback_company: Company to report when the record has none.

    Returns:
        Contact with "N/A" for missing values.
    """
    organization = person.get("organization") or {}
    phones = person.get("phone_numbers") or []
    phone = phones[0].get("sanitized_number") if phones and isinstance(phones[0], dict) else None

    return Contact(
        name=person.get("name") or NOT_AVAILABLE,
        title=person.get("title") or NOT_AVAILABLE,
        company=organization.get("name") or fallback_company or NOT_AVAILABLE,
        email=person.get("email") or NOT_AVAILABLE,
        phone=phone or NOT_AVAILABLE,
        location=_format_location(person),
        linkedin_url=person.get("linkedin_url") or None,
    )


class ContactSearchClient:
    """Client for the people-search endpoint."""

    def __init__(
        self,
        settings: ContactSearchSettings,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Endpoint settings. Must carry an API key.
            session: Optional requests session (a new one is created if None).

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if not settings.api_key:
            raise ConfigurationError(
                "Apollo API key not configured. Set APOLLO_API_KEY in your environment."
            )

        self.settings = settings
        self.session = session or requests.Session()

    @property
    def search_url(self) -> str:
        return f"{self.settings.base_url.rstrip('/')}/mixed_people/search"

    def search(self, query: ContactQuery) -> list[Contact]:
        """
        Search for contacts at a company.

        Args:
            query: Search criteria.

        Returns:
            Contacts found (possibly empty).

        Raises:
            ContactSearchError: On network errors or non-2xx responses.
        """
        payload = build_search_payload(query)
        headers = {
            "Content-Type": "application/json",
            "Cache-Control": "no-cache",
            "X-Api-Key": self.settings.api_key,
        }

        logger.info(
            "Contact search start company=%s country=%s",
            query.company_name,
            query.country,
        )
        start = time.perf_counter()

        try:
            response = self.session.post(
                self.search_url,
                json=payload,
                headers=headers,
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("Contact search request failed: %s", e, exc_info=True)
            raise ContactSearchError(f"Contact search request failed: {e}") from e

        if response.status_code == 401:
            raise ContactSearchError(
                "Invalid Apollo API key. Please check your APOLLO_API_KEY.", status_code=401
            )
        if response.status_code == 429:
            raise ContactSearchError(
                "Apollo API rate limit exceeded. Please try again later.", status_code=429
            )
        if not response.ok:
            logger.error("Contact search failed status=%s", response.status_code)
            raise ContactSearchError(
                f"Apollo API error: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ContactSearchError("Apollo API returned invalid JSON") from e

        people = (data.get("people") or []) if isinstance(data, dict) else []
        contacts = [
            parse_person(person, query.company_name)
            for person in people
            if isinstance(person, dict)
        ]

        logger.info(
            "Contact search complete found=%s duration=%.3fs",
            len(contacts),
            time.perf_counter() - start,
        )
        return contacts
