"""
Business Logic Services for the ATS Matcher API.

Supports async operations for concurrent LLM calls. API keys supplied with
a request are used for that request only and never stored.
"""

import logging
import time
from typing import Callable, Optional

from dotenv import load_dotenv

from ats_matcher.ai_analysis import (
    NO_CLIENT_WARNING,
    AnalysisOutcome,
    analyze_with_fallback_async,
    compare_resumes,
    ranked,
)
from ats_matcher.config import Settings, load_settings
from ats_matcher.contacts import ContactQuery, ContactSearchClient
from ats_matcher.data_extraction import extract_text_from_upload
from ats_matcher.errors import InputValidationError
from ats_matcher.generators import (
    generate_cold_email_async,
    generate_cover_letter_async,
    optimize_skills_async,
    smart_autofill_async,
)
from ats_matcher.keyword_engine import categorize_keywords
from ats_matcher.llm_client import LLMClient, get_client, get_optional_client
from ats_matcher.matcher import MatchStrategy, analyze_locally, resolve_strategy
from ats_matcher.resume_builder import (
    ResumeDraft,
    add_skill,
    build_resume_text,
    export_filename,
    live_score_async,
)
from ats_matcher.validation import require_job_description, require_resume_text
from backend.schemas import (
    AddSkillRequest,
    AddSkillResponse,
    AnalyzeRequest,
    AnalyzeResponse,
    ColdEmailRequest,
    ColdEmailResponse,
    CompareRequest,
    CompareResponse,
    ContactSearchRequest,
    ContactSearchResponse,
    CoverLetterRequest,
    CoverLetterResponse,
    ResumeExportResponse,
    ResumeScoreRequest,
    SkillsRequest,
    SkillsResponse,
)

# * Module logger
logger = logging.getLogger("ats_matcher.services")

NO_CONTACTS_MESSAGE = "No contacts found. Try broadening your search criteria."


def _to_response(outcome: AnalysisOutcome) -> AnalyzeResponse:
    result = outcome.result
    return AnalyzeResponse(
        result=result,
        source=outcome.source,
        warning=outcome.warning,
        matched_by_category=categorize_keywords(result.matched_keywords),
        missing_by_category=categorize_keywords(result.missing_keywords),
    )


class ResumeAnalysisService:
    """Service for scoring resumes against job descriptions."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[..., Optional[LLMClient]] = get_optional_client,
    ):
        """
        Initialize the analysis service.

        Args:
            settings: Application settings.
            client_factory: Builds an LLM client from settings and an optional
                request-scoped key; returns None when no key is available.
        """
        self.settings = settings
        self._client_factory = client_factory

    def _strategy(self, requested: Optional[MatchStrategy]) -> MatchStrategy:
        return requested or self.settings.match_strategy

    def _client(self, use_ai: bool, api_key: Optional[str]) -> Optional[LLMClient]:
        if not use_ai:
            return None
        return self._client_factory(self.settings.llm, api_key)

    async def analyze(self, request: AnalyzeRequest, api_key: Optional[str] = None) -> AnalyzeResponse:
        """
        Analyze a resume against a job description.

        Args:
            request: Analyze request.
            api_key: Optional request-scoped LLM key.

        Returns:
            AnalyzeResponse. AI failures degrade to local matching with a warning.
        """
        resume_text = require_resume_text(request.resume_text)
        job_description = require_job_description(request.job_description)
        strategy = self._strategy(request.strategy)

        start = time.perf_counter()
        logger.info(
            "Analyze start use_ai=%s strategy=%s resume_chars=%s job_chars=%s",
            request.use_ai,
            strategy.value,
            len(resume_text),
            len(job_description),
        )

        if request.use_ai:
            client = self._client(True, api_key)
            outcome = await analyze_with_fallback_async(resume_text, job_description, client, strategy)
        else:
            outcome = AnalysisOutcome(
                result=analyze_locally(resume_text, job_description, strategy),
                source="local",
            )

        logger.info(
            "Analyze complete source=%s score=%s duration=%.3fs",
            outcome.source,
            outcome.result.score,
            time.perf_counter() - start,
        )
        return _to_response(outcome)

    async def analyze_upload(
        self,
        filename: str,
        content: bytes,
        job_description: str,
        use_ai: bool = True,
        strategy: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> AnalyzeResponse:
        """
        Analyze an uploaded resume file.

        Raises:
            TextExtractionError: If the file cannot be read.
            InputValidationError: If inputs are empty or too short.
            ValueError: If the strategy name is unknown.
        """
        resume_text = extract_text_from_upload(filename, content)
        request = AnalyzeRequest(
            resume_text=resume_text,
            job_description=job_description,
            use_ai=use_ai,
            strategy=resolve_strategy(strategy) if strategy else None,
        )
        return await self.analyze(request, api_key)

    async def compare(self, request: CompareRequest, api_key: Optional[str] = None) -> CompareResponse:
        """
        Compare several resumes against one job description.

        Returns:
            CompareResponse with failed resumes listed separately and a
            warning when AI was requested but no key is configured.
        """
        job_description = require_job_description(request.job_description)
        for resume in request.resumes:
            require_resume_text(resume.text, resume.name)

        client = self._client(request.use_ai, api_key)
        entries = await compare_resumes(
            request.resumes,
            job_description,
            client,
            self._strategy(request.strategy),
        )

        warning = None
        if request.use_ai and client is None:
            logger.warning("Compare running without an LLM client; scoring locally")
            warning = NO_CLIENT_WARNING

        return CompareResponse(
            entries=entries,
            ranked=ranked(entries),
            failed=[entry.name for entry in entries if not entry.scored],
            warning=warning,
        )

    async def score_draft(self, request: ResumeScoreRequest, api_key: Optional[str] = None) -> AnalyzeResponse:
        """Live score for a resume draft; empty inputs give a zero score."""
        client = self._client(request.use_ai, api_key)
        outcome = await live_score_async(
            request.draft,
            request.job_description,
            client,
            self._strategy(request.strategy),
        )
        return _to_response(outcome)


class ResumeBuilderService:
    """Stateless helpers for the resume builder."""

    def export(self, draft: ResumeDraft) -> ResumeExportResponse:
        return ResumeExportResponse(filename=export_filename(draft), text=build_resume_text(draft))

    def add_skill(self, request: AddSkillRequest) -> AddSkillResponse:
        return AddSkillResponse(skills=add_skill(request.skills, request.skill))


class GenerationService:
    """Service for LLM-generated documents. An API key is required."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[..., LLMClient] = get_client,
    ):
        self.settings = settings
        self._client_factory = client_factory

    def _client(self, api_key: Optional[str]) -> LLMClient:
        return self._client_factory(self.settings.llm, api_key)

    async def cover_letter(self, request: CoverLetterRequest, api_key: Optional[str] = None) -> CoverLetterResponse:
        resume_text = require_resume_text(request.resume_text)
        job_description = require_resume_text(request.job_description, "Job description")

        letter = await generate_cover_letter_async(
            resume_text,
            job_description,
            self._client(api_key),
            company_name=request.company_name,
            hiring_manager=request.hiring_manager,
            custom_instructions=request.custom_instructions,
        )
        return CoverLetterResponse(cover_letter=letter.cover_letter)

    async def cold_email(self, request: ColdEmailRequest, api_key: Optional[str] = None) -> ColdEmailResponse:
        resume_text = require_resume_text(request.resume_text)
        job_description = require_resume_text(request.job_description, "Job description")

        email = await generate_cold_email_async(
            resume_text,
            job_description,
            self._client(api_key),
            recipient_name=request.recipient_name,
            recipient_title=request.recipient_title,
            company_name=request.company_name,
            custom_instructions=request.custom_instructions,
        )
        return ColdEmailResponse(subject=email.subject, body=email.body)

    async def optimize_skills(self, request: SkillsRequest, api_key: Optional[str] = None) -> SkillsResponse:
        job_description = require_resume_text(request.job_description, "Job description")
        suggestions = await optimize_skills_async(
            request.current_skills, job_description, self._client(api_key)
        )
        return SkillsResponse(suggested_skills=suggestions.suggested_skills)

    async def smart_autofill(self, prompt: str, api_key: Optional[str] = None) -> ResumeDraft:
        return await smart_autofill_async(prompt, self._client(api_key))


class ContactService:
    """Service for recruiter contact lookup."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[..., ContactSearchClient] = ContactSearchClient,
    ):
        self.settings = settings
        self._client_factory = client_factory

    def search(self, request: ContactSearchRequest) -> ContactSearchResponse:
        """
        Search contacts at a company.

        Raises:
            ConfigurationError: If no Apollo key is configured.
            ContactSearchError: If the upstream call fails.
        """
        if not request.company_name.strip():
            raise InputValidationError("Please enter a company name")

        query = ContactQuery(
            company_name=request.company_name.strip(),
            country=request.country,
            job_title=request.job_title,
        )
        contacts = self._client_factory(self.settings.contacts).search(query)

        logger.info("Contacts listed count=%s", len(contacts))
        return ContactSearchResponse(
            contacts=contacts,
            message=None if contacts else NO_CONTACTS_MESSAGE,
        )


# * Load environment variables before reading settings
load_dotenv()
settings = load_settings()

# * Global service instances
analysis_service = ResumeAnalysisService(settings)
builder_service = ResumeBuilderService()
generation_service = GenerationService(settings)
contact_service = ContactService(settings)
