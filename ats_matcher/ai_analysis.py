"""
AI-Backed Resume Analysis.

Asks the LLM for a MatchResult-shaped JSON analysis and falls back to local
keyword matching when anything goes wrong. Also compares several resumes
against one job description concurrently.
"""

import asyncio
import logging
import time
from typing import Literal, Optional

from pydantic import BaseModel

from ats_matcher.errors import (
    AIAnalysisError,
    InputValidationError,
    LLMError,
    ResponseParseError,
)
from ats_matcher.llm_client import ANALYSIS_CONFIG, LLMClient
from ats_matcher.matcher import MatchResult, MatchStrategy, analyze_locally
from ats_matcher.response_parser import decode_model

logger = logging.getLogger("ats_matcher.ai_analysis")

NO_CLIENT_WARNING = "AI analysis is not configured; showing keyword-based results."
AI_FAILED_WARNING = "AI analysis failed; showing keyword-based results instead."

MIN_COMPARE_RESUMES = 2


def build_analysis_prompt(resume_text: str, job_description: str) -> str:
    """Build the analysis prompt requesting a strict JSON MatchResult."""
    return f"""You are an expert ATS (Applicant Tracking System) resume analyzer. Analyze the following resume against the job description and provide detailed feedback.

RESUME:
{resume_text}

JOB DESCRIPTION:
{job_description}

Analyze and provide:
1. A compatibility score (0-100) based on how well the resume matches the job requirements
2. List of matched technical skills/keywords found in both resume and job description
3. List of missing technical skills/keywords from the job description that are not in the resume
4. 3-5 new resume bullet points in STAR format (Situation, Task, Action, Result) that the candidate should add to better match the job description
5. ATS optimization tips specific to this resume and job description

Return your analysis in the following JSON format:
{{
  "score": <number 0-100>,
  "matchedKeywords": ["keyword1", "keyword2", ...],
  "missingKeywords": ["keyword1", "keyword2", ...],
  "suggestions": ["suggestion1", "suggestion2", ...],
  "starFormatPoints": ["STAR point 1", "STAR point 2", ...],
  "atsOptimizations": ["tip1", "tip2", ...]
}}

Be specific and actionable. Focus on technical skills, tools, frameworks, and measurable achievements."""


class AnalysisOutcome(BaseModel):
    """A MatchResult together with where it came from."""

    result: MatchResult
    source: Literal["ai", "local"]
    warning: Optional[str] = None


class ResumeInput(BaseModel):
    """A named resume submitted for comparison."""

    name: str
    text: str


class ComparisonEntry(BaseModel):
    """Analysis of one resume in a comparison. result is None on failure."""

    name: str
    result: Optional[MatchResult] = None
    error: Optional[str] = None

    @property
    def scored(self) -> bool:
        return self.result is not None


def analyze_with_ai(resume_text: str, job_description: str, client: LLMClient) -> MatchResult:
    """
    Analyze a resume with one LLM call (sync).

    Args:
        resume_text: Resume text.
        job_description: Job description text.
        client: Configured LLM client.

    Returns:
        MatchResult decoded from the model response.

    Raises:
        AIAnalysisError: On any upstream or parsing failure.
    """
    start = time.perf_counter()
    try:
        text = client.generate(build_analysis_prompt(resume_text, job_description), ANALYSIS_CONFIG)
        result = decode_model(text, MatchResult)
    except (LLMError, ResponseParseError) as e:
        raise AIAnalysisError(str(e)) from e

    logger.info(
        "AI analysis complete score=%s matched=%s missing=%s duration=%.3fs",
        result.score,
        len(result.matched_keywords),
        len(result.missing_keywords),
        time.perf_counter() - start,
    )
    return result


async def analyze_with_ai_async(
    resume_text: str,
    job_description: str,
    client: LLMClient,
) -> MatchResult:
    """
    Analyze a resume with one LLM call (async).

    Raises:
        AIAnalysisError: On any upstream or parsing failure.
    """
    start = time.perf_counter()
    try:
        text = await client.generate_async(
            build_analysis_prompt(resume_text, job_description), ANALYSIS_CONFIG
        )
        result = decode_model(text, MatchResult)
    except (LLMError, ResponseParseError) as e:
        raise AIAnalysisError(str(e)) from e

    logger.info(
        "AI analysis async complete score=%s duration=%.3fs",
        result.score,
        time.perf_counter() - start,
    )
    return result


def _local_outcome(
    resume_text: str,
    job_description: str,
    strategy: Optional[str | MatchStrategy],
    warning: Optional[str],
) -> AnalysisOutcome:
    return AnalysisOutcome(
        result=analyze_locally(resume_text, job_description, strategy),
        source="local",
        warning=warning,
    )


def analyze_with_fallback(
    resume_text: str,
    job_description: str,
    client: Optional[LLMClient],
    strategy: Optional[str | MatchStrategy] = None,
) -> AnalysisOutcome:
    """
    Analyze with the LLM, falling back to local matching on failure.

    Never raises for upstream failures: the caller always gets a result,
    with a warning when the local heuristic was used instead.

    Args:
        resume_text: Resume text.
        job_description: Job description text.
        client: LLM client, or None when no key is configured.
        strategy: Local strategy used for the fallback.

    Returns:
        AnalysisOutcome.
    """
    if client is None:
        return _local_outcome(resume_text, job_description, strategy, NO_CLIENT_WARNING)

    try:
        result = analyze_with_ai(resume_text, job_description, client)
    except AIAnalysisError as e:
        logger.warning("AI analysis failed, using local fallback: %s", e)
        return _local_outcome(resume_text, job_description, strategy, AI_FAILED_WARNING)

    return AnalysisOutcome(result=result, source="ai")


async def analyze_with_fallback_async(
    resume_text: str,
    job_description: str,
    client: Optional[LLMClient],
    strategy: Optional[str | MatchStrategy] = None,
) -> AnalysisOutcome:
    """Async variant of analyze_with_fallback."""
    if client is None:
        return _local_outcome(resume_text, job_description, strategy, NO_CLIENT_WARNING)

    try:
        result = await analyze_with_ai_async(resume_text, job_description, client)
    except AIAnalysisError as e:
        logger.warning("AI analysis async failed, using local fallback: %s", e)
        return _local_outcome(resume_text, job_description, strategy, AI_FAILED_WARNING)

    return AnalysisOutcome(result=result, source="ai")


async def _compare_one(resume: ResumeInput, job_description: str, client: LLMClient) -> ComparisonEntry:
    try:
        result = await analyze_with_ai_async(resume.text, job_description, client)
    except AIAnalysisError as e:
        logger.warning("Comparison analysis failed resume=%s error=%s", resume.name, e)
        return ComparisonEntry(name=resume.name, error=f"Failed to analyze {resume.name}")
    return ComparisonEntry(name=resume.name, result=result)


async def compare_resumes(
    resumes: list[ResumeInput],
    job_description: str,
    client: Optional[LLMClient],
    strategy: Optional[str | MatchStrategy] = None,
) -> list[ComparisonEntry]:
    """
    Analyze several resumes against one job description.

    With a client, one LLM call per resume runs concurrently; a failure is
    isolated to its own entry, which stays unscored. Without a client every
    resume is scored locally.

    Args:
        resumes: At least MIN_COMPARE_RESUMES named resumes.
        job_description: Job description text.
        client: LLM client, or None for local scoring.
        strategy: Local strategy used when client is None.

    Returns:
        One ComparisonEntry per resume, in input order.

    Raises:
        InputValidationError: If fewer than MIN_COMPARE_RESUMES are given.
    """
    if len(resumes) < MIN_COMPARE_RESUMES:
        raise InputValidationError(
            f"Please upload at least {MIN_COMPARE_RESUMES} resumes to compare"
        )

    start = time.perf_counter()

    if client is None:
        entries = [
            ComparisonEntry(
                name=resume.name,
                result=analyze_locally(resume.text, job_description, strategy),
            )
            for resume in resumes
        ]
    else:
        entries = list(await asyncio.gather(
            *(_compare_one(resume, job_description, client) for resume in resumes)
        ))

    logger.info(
        "Comparison complete resumes=%s scored=%s duration=%.3fs",
        len(entries),
        sum(1 for entry in entries if entry.scored),
        time.perf_counter() - start,
    )
    return entries


def ranked(entries: list[ComparisonEntry]) -> list[ComparisonEntry]:
    """Scored entries only, best score first. Ties keep input order."""
    scored = [entry for entry in entries if entry.result is not None]
    return sorted(scored, key=lambda entry: -entry.result.score)
