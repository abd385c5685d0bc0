"""HTTP layer for the ATS Resume Matcher."""
