"""
ATS Resume Matcher - Source Package.

This package contains modules for:
- Text extraction from uploaded resumes (plain text and PDF)
- Keyword matching and compatibility scoring
- LLM-backed analysis with a local heuristic fallback
- Cover letter, cold email and skills generation
- Recruiter contact lookup
"""

__version__ = "1.0.0"
