"""
Pydantic Schemas for API Request/Response Models.

Field names are snake_case in Python and camelCase on the wire; requests
accept either form.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ats_matcher.ai_analysis import ComparisonEntry, ResumeInput
from ats_matcher.contacts import Contact
from ats_matcher.matcher import MatchResult, MatchStrategy
from ats_matcher.resume_builder import ResumeDraft


class APIModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class AnalyzeRequest(APIModel):
    """Request body for the analyze endpoint."""

    resume_text: str = Field(..., description="Resume text")
    job_description: str = Field(..., description="The job description text to analyze")
    use_ai: bool = Field(default=True, description="Try LLM analysis before local matching")
    strategy: Optional[MatchStrategy] = Field(
        default=None, description="Local matching strategy (default from settings)"
    )


class AnalyzeResponse(APIModel):
    """Response from the analyze endpoints."""

    result: MatchResult
    source: Literal["ai", "local"]
    warning: Optional[str] = Field(default=None, description="Non-fatal notice for the user")
    matched_by_category: dict[str, list[str]] = Field(default_factory=dict)
    missing_by_category: dict[str, list[str]] = Field(default_factory=dict)


class CompareRequest(APIModel):
    """Request body for comparing several resumes."""

    resumes: list[ResumeInput] = Field(..., description="At least two named resumes")
    job_description: str
    use_ai: bool = True
    strategy: Optional[MatchStrategy] = None


class CompareResponse(APIModel):
    """All entries in input order, plus scored entries ranked by score."""

    entries: list[ComparisonEntry]
    ranked: list[ComparisonEntry]
    failed: list[str] = Field(default_factory=list, description="Names of resumes that failed")
    warning: Optional[str] = Field(default=None, description="Non-fatal notice for the user")


class ResumeScoreRequest(APIModel):
    """Live scoring of a resume draft."""

    draft: ResumeDraft
    job_description: str = ""
    use_ai: bool = True
    strategy: Optional[MatchStrategy] = None


class ResumeExportResponse(APIModel):
    filename: str
    text: str


class AddSkillRequest(APIModel):
    skills: str = ""
    skill: str


class AddSkillResponse(APIModel):
    skills: str


class CoverLetterRequest(APIModel):
    resume_text: str
    job_description: str
    company_name: Optional[str] = None
    hiring_manager: Optional[str] = None
    custom_instructions: Optional[str] = None


class CoverLetterResponse(APIModel):
    cover_letter: str


class ColdEmailRequest(APIModel):
    resume_text: str
    job_description: str
    recipient_name: str
    recipient_title: str
    company_name: str
    custom_instructions: Optional[str] = None


class ColdEmailResponse(APIModel):
    subject: str
    body: str


class SkillsRequest(APIModel):
    current_skills: str = ""
    job_description: str


class SkillsResponse(APIModel):
    suggested_skills: list[str]


class AutofillRequest(APIModel):
    prompt: str = Field(..., description="Short description of the candidate's background")


class ContactSearchRequest(APIModel):
    company_name: str
    country: Optional[str] = None
    job_title: Optional[str] = None


class ContactSearchResponse(APIModel):
    contacts: list[Contact]
    message: Optional[str] = None
