"""
FastAPI Backend for the ATS Resume Matcher.

Provides REST API endpoints for:
- Scoring a resume against a job description (AI with local fallback)
- Comparing several resumes
- Live scoring and export for the resume builder
- Cover letter, cold email, skills and resume draft generation
- Recruiter contact search
"""

from typing import Optional

from fastapi import FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from ats_matcher import __version__
from ats_matcher.errors import (
    ATSMatcherError,
    ConfigurationError,
    ContactSearchError,
    GenerationError,
    InputValidationError,
    LLMError,
    TextExtractionError,
)
from ats_matcher.logging_config import configure_logging
from ats_matcher.resume_builder import ResumeDraft
from backend.schemas import (
    AddSkillRequest,
    AddSkillResponse,
    AnalyzeRequest,
    AnalyzeResponse,
    AutofillRequest,
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
from backend.services import (
    analysis_service,
    builder_service,
    contact_service,
    generation_service,
    settings,
)

# * Session-scoped LLM key sent by the frontend; overrides the server key
API_KEY_HEADER = "X-LLM-API-Key"

configure_logging(settings.log_level)

# * Create FastAPI app
app = FastAPI(
    title="ATS Resume Matcher API",
    description="API for scoring resumes against job descriptions and generating application material",
    version=__version__,
)

# * Configure CORS for the browser frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(error: ATSMatcherError) -> HTTPException:
    """Map a library error to an HTTP error."""
    if isinstance(error, InputValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ConfigurationError):
        return HTTPException(status_code=500, detail=str(error))
    if isinstance(error, TextExtractionError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, ContactSearchError) and error.status_code in (401, 429):
        return HTTPException(status_code=error.status_code, detail=str(error))
    if isinstance(error, (ContactSearchError, GenerationError, LLMError)):
        return HTTPException(status_code=502, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "ATS Resume Matcher API", "version": __version__}


@app.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze_resume(
    request: AnalyzeRequest,
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """
    Score a resume against a job description.

    Falls back to local keyword matching (with a warning) if AI analysis is
    unavailable or fails.
    """
    try:
        return await analysis_service.analyze(request, llm_api_key)
    except ATSMatcherError as e:
        raise _http_error(e) from e


@app.post("/api/analyze/upload", response_model=AnalyzeResponse)
async def analyze_upload(
    resume: UploadFile = File(...),
    job_description: str = Form(...),
    use_ai: bool = Form(default=True),
    strategy: Optional[str] = Form(default=None),
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """
    Score an uploaded resume file (text or PDF) against a job description.
    """
    content = await resume.read()

    try:
        return await analysis_service.analyze_upload(
            filename=resume.filename or "resume.txt",
            content=content,
            job_description=job_description,
            use_ai=use_ai,
            strategy=strategy,
            api_key=llm_api_key,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unknown strategy: {strategy}") from e
    except ATSMatcherError as e:
        raise _http_error(e) from e


@app.post("/api/compare", response_model=CompareResponse)
async def compare(
    request: CompareRequest,
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """
    Compare several resumes against one job description.

    Resumes whose analysis fails stay unscored and are listed in `failed`.
    """
    try:
        return await analysis_service.compare(request, llm_api_key)
    except ATSMatcherError as e:
        raise _http_error(e) from e


@app.post("/api/resume-builder/score", response_model=AnalyzeResponse)
async def score_draft(
    request: ResumeScoreRequest,
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """Live score for a resume being built."""
    return await analysis_service.score_draft(request, llm_api_key)


@app.post("/api/resume-builder/export", response_model=ResumeExportResponse)
async def export_draft(draft: ResumeDraft):
    """Render a resume draft as plain text with a download file name."""
    return builder_service.export(draft)


@app.post("/api/resume-builder/add-skill", response_model=AddSkillResponse)
async def add_skill(request: AddSkillRequest):
    """Append a skill to a comma-separated skills list."""
    return builder_service.add_skill(request)


@app.post("/api/cover-letter", response_model=CoverLetterResponse)
async def cover_letter(
    request: CoverLetterRequest,
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """Generate a cover letter."""
    try:
        return await generation_service.cover_letter(request, llm_api_key)
    except ATSMatcherError as e:
        raise _http_error(e) from e


@app.post("/api/cold-email", response_model=ColdEmailResponse)
async def cold_email(
    request: ColdEmailRequest,
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """Generate a cold email to a contact."""
    try:
        return await generation_service.cold_email(request, llm_api_key)
    except ATSMatcherError as e:
        raise _http_error(e) from e


@app.post("/api/optimize-skills", response_model=SkillsResponse)
async def optimize_skills(
    request: SkillsRequest,
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """Suggest skills to add for a job description."""
    try:
        return await generation_service.optimize_skills(request, llm_api_key)
    except ATSMatcherError as e:
        raise _http_error(e) from e


@app.post("/api/smart-autofill", response_model=ResumeDraft)
async def smart_autofill(
    request: AutofillRequest,
    llm_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
):
    """Generate a full resume draft from a background description."""
    try:
        return await generation_service.smart_autofill(request.prompt, llm_api_key)
    except ATSMatcherError as e:
        raise _http_error(e) from e


@app.post("/api/contacts/search", response_model=ContactSearchResponse)
def search_contacts(request: ContactSearchRequest):
    """
    Find recruiters and executives at a company.
    """
    try:
        return contact_service.search(request)
    except ATSMatcherError as e:
        raise _http_error(e) from e


# * Run with: uvicorn backend.api:app --reload --port 8000
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
