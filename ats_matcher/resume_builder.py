"""
Resume Builder.

Structured resume drafts, their plain-text rendering and live scoring
against a target job description.
"""

import re
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ats_matcher.ai_analysis import (
    AnalysisOutcome,
    analyze_with_fallback,
    analyze_with_fallback_async,
)
from ats_matcher.llm_client import LLMClient
from ats_matcher.matcher import MatchResult, MatchStrategy


class Experience(BaseModel):
    """One work experience entry."""

    company: str = ""
    role: str = ""
    duration: str = ""
    description: str = ""

    @field_validator("company", "role", "duration", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ResumeDraft(BaseModel):
    """A resume being built field by field."""

    name: str = ""
    email: str = ""
    phone: str = ""
    summary: str = ""
    skills: str = Field(default="", description="Comma-separated skills")
    experiences: list[Experience] = Field(default_factory=list)

    @field_validator("name", "email", "phone", "summary", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("skills", mode="before")
    @classmethod
    def _join_skills(cls, value: Any) -> Any:
        # * Generated drafts sometimes return skills as a list
        if value is None:
            return ""
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return ", ".join(item.strip() for item in value if item.strip())
        return value

    @field_validator("experiences", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


def build_resume_text(draft: ResumeDraft) -> str:
    """
    Render a draft as plain text.

    Args:
        draft: Resume draft.

    Returns:
        Resume text with SUMMARY, SKILLS and EXPERIENCE sections.
    """
    experience_text = "\n\n".join(
        f"{exp.role} at {exp.company} ({exp.duration})\n{exp.description}"
        for exp in draft.experiences
    )
    return (
        f"{draft.name}\n{draft.email} | {draft.phone}\n\n"
        f"SUMMARY:\n{draft.summary}\n\n"
        f"SKILLS:\n{draft.skills}\n\n"
        f"EXPERIENCE:\n{experience_text}"
    )


def has_content(draft: ResumeDraft) -> bool:
    """True when any field of the draft has been filled in."""
    if any(value.strip() for value in (draft.name, draft.email, draft.phone, draft.summary, draft.skills)):
        return True
    return any(
        any(value.strip() for value in (exp.company, exp.role, exp.duration, exp.description))
        for exp in draft.experiences
    )


def add_skill(skills: str, skill: str) -> str:
    """
    Append a skill to a comma-separated skills string if not already present.

    Args:
        skills: Current comma-separated skills.
        skill: Skill to add.

    Returns:
        Updated skills string, normalized to ", " separators.
    """
    current = [item.strip() for item in (skills or "").split(",") if item.strip()]
    skill = skill.strip()
    if skill and skill not in current:
        current.append(skill)
    return ", ".join(current)


def export_filename(draft: ResumeDraft) -> str:
    """File name used when exporting a draft as text."""
    base = re.sub(r"\s+", "_", draft.name.strip()) or "Untitled"
    return f"{base}_Resume.txt"


def live_score(
    draft: ResumeDraft,
    job_description: str,
    client: Optional[LLMClient] = None,
    strategy: Optional[str | MatchStrategy] = None,
) -> AnalysisOutcome:
    """
    Score a draft against a job description.

    Nothing is analyzed until both a job description and some resume
    content exist; an empty MatchResult is returned instead.

    Args:
        draft: Resume draft.
        job_description: Target job description.
        client: Optional LLM client; local matching is used without one or
            when the AI call fails.
        strategy: Local strategy for the fallback.

    Returns:
        AnalysisOutcome.
    """
    if not job_description.strip() or not has_content(draft):
        return AnalysisOutcome(result=MatchResult(), source="local")

    return analyze_with_fallback(build_resume_text(draft), job_description, client, strategy)


async def live_score_async(
    draft: ResumeDraft,
    job_description: str,
    client: Optional[LLMClient] = None,
    strategy: Optional[str | MatchStrategy] = None,
) -> AnalysisOutcome:
    """Async variant of live_score."""
    if not job_description.strip() or not has_content(draft):
        return AnalysisOutcome(result=MatchResult(), source="local")

    return await analyze_with_fallback_async(build_resume_text(draft), job_description, client, strategy)
