"""
LLM Content Generators.

Generates cover letters, cold emails, skill suggestions and complete resume
drafts. Every generator asks for a JSON answer and decodes it through the
same JSON parser as the resume analysis. There is no local fallback
for generated prose: failures raise GenerationError.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ats_matcher.errors import GenerationError, InputValidationError, LLMError, ResponseParseError
from ats_matcher.llm_client import (
    CREATIVE_CONFIG,
    SHORT_CONFIG,
    SHORT_CREATIVE_CONFIG,
    GenerationConfig,
    LLMClient,
)
from ats_matcher.resume_builder import ResumeDraft
from ats_matcher.response_parser import decode_model

logger = logging.getLogger("ats_matcher.generators")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class CoverLetter(_CamelModel):
    cover_letter: str = ""

    @field_validator("cover_letter", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class ColdEmail(_CamelModel):
    subject: str = ""
    body: str = ""

    @field_validator("subject", "body", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class SkillSuggestions(_CamelModel):
    suggested_skills: list[str] = Field(default_factory=list)

    @field_validator("suggested_skills", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return [] if value is None else value


def build_cover_letter_prompt(
    resume_text: str,
    job_description: str,
    company_name: Optional[str] = None,
    hiring_manager: Optional[str] = None,
    custom_instructions: Optional[str] = None,
) -> str:
    context_lines = []
    if company_name:
        context_lines.append(f"COMPANY NAME: {company_name}")
    if hiring_manager:
        context_lines.append(f"HIRING MANAGER: {hiring_manager}")
    if custom_instructions:
        context_lines.append(f"ADDITIONAL INSTRUCTIONS: {custom_instructions}")
    context = "\n".join(context_lines)

    return f"""You are an expert cover letter writer. Create a professional, compelling cover letter based on the following information:

RESUME:
{resume_text}

JOB DESCRIPTION:
{job_description}

{context}

Write a cover letter that:
1. Opens with a strong hook that shows enthusiasm and relevant experience
2. Highlights 2-3 key achievements from the resume that directly match the job requirements
3. Demonstrates understanding of the company and role
4. Shows personality while remaining professional
5. Closes with a clear call to action

Keep it concise (3-4 paragraphs), engaging, and tailored to this specific role. Use professional business letter format.

Return the cover letter in this JSON format:
{{
  "coverLetter": "full cover letter text"
}}"""


def build_cold_email_prompt(
    resume_text: str,
    job_description: str,
    recipient_name: str,
    recipient_title: str,
    company_name: str,
    custom_instructions: Optional[str] = None,
) -> str:
    instructions = custom_instructions or "Write a professional, personalized cold email"
    return f"""You are an expert at writing professional cold emails for job applications.

Generate a compelling cold email with the following context:
- Recipient: {recipient_name}
- Title: {recipient_title}
- Company: {company_name}
- Job Description: {job_description}

MY RESUME:
{resume_text}

Additional Instructions: {instructions}

Write a professional, personalized cold email that:
1. Has a compelling subject line
2. Opens with a strong hook
3. Demonstrates research about the company
4. Highlights relevant skills and experience
5. Includes a clear call-to-action
6. Is concise (under 200 words)

Return the email in this JSON format:
{{
  "subject": "email subject line",
  "body": "email body content"
}}"""


def build_skills_prompt(current_skills: str, job_description: str) -> str:
    return f"""You are an ATS and skills optimization expert. Analyze the job description and suggest skills that should be added to the resume.

CURRENT SKILLS:
{current_skills}

JOB DESCRIPTION:
{job_description}

Provide a list of 5-10 skills that are:
1. Mentioned or implied in the job description
2. NOT already in the current skills list
3. Relevant and important for the role
4. Commonly searched by ATS systems
5. Industry-standard terms

Return your response in this JSON format:
{{
  "suggestedSkills": ["skill1", "skill2", "skill3", ...]
}}

Focus on technical skills, tools, frameworks, certifications, and methodologies."""


def build_autofill_prompt(description: str) -> str:
    return f"""You are an expert resume writer. Based on the following user description, generate a complete professional resume with realistic and detailed information.

USER DESCRIPTION:
{description}

Generate a comprehensive resume with:
1. Full name (generate a realistic name if not provided)
2. Contact information (email and phone - use realistic formats)
3. Professional summary (3-4 sentences highlighting key strengths)
4. Skills (10-15 relevant skills based on the description)
5. Work experiences (2-4 experiences with company names, roles, durations, and detailed descriptions using action verbs and quantifiable achievements)

Return your response in this EXACT JSON format:
{{
  "name": "Full Name",
  "email": "email@example.com",
  "phone": "+1 234 567 8900",
  "summary": "Professional summary text...",
  "skills": "Skill1, Skill2, Skill3, ...",
  "experiences": [
    {{
      "company": "Company Name",
      "role": "Job Title",
      "duration": "Jan 2020 - Present",
      "description": "• Achievement 1 with quantifiable result\\n• Achievement 2 with quantifiable result"
    }}
  ]
}}

Make it professional, ATS-friendly, and use strong action verbs. Include numbers and metrics where appropriate."""


def _split_skills(skills: str) -> list[str]:
    return [skill.strip() for skill in skills.split(",") if skill.strip()]


def filter_new_skills(current_skills: str, suggested: list[str]) -> list[str]:
    """
    Drop suggestions already present in a comma-separated skills string.

    Comparison is case-insensitive; duplicates among suggestions are removed.
    """
    existing = {skill.lower() for skill in _split_skills(current_skills or "")}
    new_skills = []
    for skill in suggested:
        skill = skill.strip()
        if skill and skill.lower() not in existing:
            existing.add(skill.lower())
            new_skills.append(skill)
    return new_skills


def _decode(text: str, response_model, what: str):
    try:
        return decode_model(text, response_model)
    except ResponseParseError as e:
        raise GenerationError(f"Could not parse {what}: {e}") from e


def _generate(client: LLMClient, prompt: str, config: GenerationConfig, what: str) -> str:
    try:
        return client.generate(prompt, config)
    except LLMError as e:
        raise GenerationError(f"Failed to generate {what}: {e}") from e


async def _generate_async(client: LLMClient, prompt: str, config: GenerationConfig, what: str) -> str:
    try:
        return await client.generate_async(prompt, config)
    except LLMError as e:
        raise GenerationError(f"Failed to generate {what}: {e}") from e


def _require_text(value: str, what: str) -> None:
    if not value or not value.strip():
        raise GenerationError(f"Generated {what} was empty")


def generate_cover_letter(
    resume_text: str,
    job_description: str,
    client: LLMClient,
    company_name: Optional[str] = None,
    hiring_manager: Optional[str] = None,
    custom_instructions: Optional[str] = None,
) -> CoverLetter:
    """
    Generate a cover letter tailored to a job description.

    Args:
        resume_text: Resume text.
        job_description: Job description text.
        client: Configured LLM client.
        company_name: Optional company name.
        hiring_manager: Optional hiring manager name.
        custom_instructions: Optional free-form instructions.

    Returns:
        CoverLetter.

    Raises:
        GenerationError: If the call fails or the response is unusable.
    """
    prompt = build_cover_letter_prompt(
        resume_text, job_description, company_name, hiring_manager, custom_instructions
    )
    letter = _decode(_generate(client, prompt, CREATIVE_CONFIG, "cover letter"), CoverLetter, "cover letter")
    _require_text(letter.cover_letter, "cover letter")
    logger.info("Cover letter generated chars=%s", len(letter.cover_letter))
    return letter


async def generate_cover_letter_async(
    resume_text: str,
    job_description: str,
    client: LLMClient,
    company_name: Optional[str] = None,
    hiring_manager: Optional[str] = None,
    custom_instructions: Optional[str] = None,
) -> CoverLetter:
    """Async variant of generate_cover_letter."""
    prompt = build_cover_letter_prompt(
        resume_text, job_description, company_name, hiring_manager, custom_instructions
    )
    text = await _generate_async(client, prompt, CREATIVE_CONFIG, "cover letter")
    letter = _decode(text, CoverLetter, "cover letter")
    _require_text(letter.cover_letter, "cover letter")
    logger.info("Cover letter generated chars=%s", len(letter.cover_letter))
    return letter


def generate_cold_email(
    resume_text: str,
    job_description: str,
    client: LLMClient,
    recipient_name: str,
    recipient_title: str,
    company_name: str,
    custom_instructions: Optional[str] = None,
) -> ColdEmail:
    """
    Generate a cold outreach email to a recruiter or hiring contact.

    Raises:
        GenerationError: If the call fails or the response is unusable.
    """
    prompt = build_cold_email_prompt(
        resume_text, job_description, recipient_name, recipient_title, company_name,
        custom_instructions,
    )
    email = _decode(_generate(client, prompt, SHORT_CREATIVE_CONFIG, "cold email"), ColdEmail, "cold email")
    _require_text(email.body, "email body")
    logger.info("Cold email generated subject_chars=%s body_chars=%s", len(email.subject), len(email.body))
    return email


async def generate_cold_email_async(
    resume_text: str,
    job_description: str,
    client: LLMClient,
    recipient_name: str,
    recipient_title: str,
    company_name: str,
    custom_instructions: Optional[str] = None,
) -> ColdEmail:
    """Async variant of generate_cold_email."""
    prompt = build_cold_email_prompt(
        resume_text, job_description, recipient_name, recipient_title, company_name,
        custom_instructions,
    )
    text = await _generate_async(client, prompt, SHORT_CREATIVE_CONFIG, "cold email")
    email = _decode(text, ColdEmail, "cold email")
    _require_text(email.body, "email body")
    return email


def optimize_skills(current_skills: str, job_description: str, client: LLMClient) -> SkillSuggestions:
    """
    Suggest skills from the job description missing from the current list.

    Args:
        current_skills: Comma-separated current skills (may be empty).
        job_description: Job description text.
        client: Configured LLM client.

    Returns:
        SkillSuggestions without skills already listed.

    Raises:
        GenerationError: If the call fails or the response is unusable.
    """
    prompt = build_skills_prompt(current_skills, job_description)
    raw = _decode(_generate(client, prompt, SHORT_CONFIG, "skills"), SkillSuggestions, "skills")
    suggestions = SkillSuggestions(suggested_skills=filter_new_skills(current_skills, raw.suggested_skills))
    logger.info("Skills optimized suggested=%s", len(suggestions.suggested_skills))
    return suggestions


async def optimize_skills_async(
    current_skills: str,
    job_description: str,
    client: LLMClient,
) -> SkillSuggestions:
    """Async variant of optimize_skills."""
    prompt = build_skills_prompt(current_skills, job_description)
    text = await _generate_async(client, prompt, SHORT_CONFIG, "skills")
    raw = _decode(text, SkillSuggestions, "skills")
    return SkillSuggestions(suggested_skills=filter_new_skills(current_skills, raw.suggested_skills))


def smart_autofill(description: str, client: LLMClient) -> ResumeDraft:
    """
    Generate a complete resume draft from a short background description.

    Raises:
        InputValidationError: If the description is empty.
        GenerationError: If the call fails or the response is unusable.
    """
    if not description or not description.strip():
        raise InputValidationError("Please describe your background")

    text = _generate(client, build_autofill_prompt(description), CREATIVE_CONFIG, "resume draft")
    draft = _decode(text, ResumeDraft, "resume draft")
    logger.info("Resume draft generated experiences=%s", len(draft.experiences))
    return draft


async def smart_autofill_async(description: str, client: LLMClient) -> ResumeDraft:
    """Async variant of smart_autofill."""
    if not description or not description.strip():
        raise InputValidationError("Please describe your background")

    text = await _generate_async(client, build_autofill_prompt(description), CREATIVE_CONFIG, "resume draft")
    return _decode(text, ResumeDraft, "resume draft")
