"""
Input checks applied before any analysis runs.
"""

from ats_matcher.errors import InputValidationError

MIN_JOB_DESCRIPTION_CHARS = 50


def require_job_description(job_description: str) -> str:
    """
    Ensure a job description is long enough to analyze.

    Args:
        job_description: Raw job description text.

    Returns:
        The stripped text.

    Raises:
        InputValidationError: If the text is empty or shorter than
            MIN_JOB_DESCRIPTION_CHARS.
    """
    text = (job_description or "").strip()
    if not text:
        raise InputValidationError("Job description cannot be empty")
    if len(text) < MIN_JOB_DESCRIPTION_CHARS:
        raise InputValidationError(
            f"Job description must be at least {MIN_JOB_DESCRIPTION_CHARS} characters "
            f"(got {len(text)})"
        )
    return text


def require_resume_text(resume_text: str, name: str = "Resume") -> str:
    """Ensure resume text is present. Returns the stripped text."""
    text = (resume_text or "").strip()
    if not text:
        raise InputValidationError(f"{name} text cannot be empty")
    return text
