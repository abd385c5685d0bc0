"""
Exception hierarchy shared by the library, the API and the CLI.
"""

from typing import Optional


class ATSMatcherError(Exception):
    """Base class for all errors raised by this package."""


class InputValidationError(ATSMatcherError):
    """Resume or job description text is missing or too short."""


class ConfigurationError(ATSMatcherError):
    """A required setting (usually an API key) is not available."""


class TextExtractionError(ATSMatcherError):
    """An uploaded file could not be turned into text."""


class LLMError(ATSMatcherError):
    """The text-generation endpoint failed or returned nothing usable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseParseError(ATSMatcherError):
    """A model response did not contain a valid JSON payload."""


class AIAnalysisError(ATSMatcherError):
    """AI-backed resume analysis failed; callers fall back to local scoring."""


class GenerationError(ATSMatcherError):
    """Cover letter, email, skills or autofill generation failed."""


class ContactSearchError(ATSMatcherError):
    """The people-search endpoint failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
