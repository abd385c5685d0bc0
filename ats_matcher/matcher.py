"""
Resume-to-Job Matching Module.

Scores how well a resume matches a job description and lists matched and
missing keywords with improvement suggestions.

Two local strategies are available:
1. Frequency matching (generic job description words, stop words removed)
2. Vocabulary matching (fixed list of known technologies)
"""

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ats_matcher.keyword_engine import find_terms
from ats_matcher.text_normalizer import clean_tokens, content_tokens, dedupe_keywords

# * Output caps
FREQUENCY_MAX_MISSING = 12
FREQUENCY_MAX_MATCHED = 15
VOCABULARY_MAX_MATCHED = 20
VOCABULARY_MAX_MISSING = 15

QUANTIFY_TIP = "Quantify your achievements with specific numbers and metrics"
ACTION_VERBS_TIP = "Use action verbs to describe your responsibilities"
TAILOR_SUMMARY_TIP = "Tailor your summary to highlight relevant experience"

KEYWORD_FIELDS = ("matched_keywords", "missing_keywords")


class MatchStrategy(str, Enum):
    """Local keyword matching strategy."""

    FREQUENCY = "frequency"
    VOCABULARY = "vocabulary"


def _keyword_list(value: Any) -> list[str]:
    """Accept a flat list or a category -> list mapping of keywords."""
    if value is None:
        return []
    if isinstance(value, dict):
        flattened = []
        for items in value.values():
            flattened.extend(_keyword_list(items))
        return flattened
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of keywords, got {type(value).__name__}")
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"keywords must be strings, got {type(item).__name__}")
    return list(value)


def clamp_score(value: float) -> int:
    """Round half up and clamp into [0, 100]."""
    rounded = math.floor(value + 0.5)
    return max(0, min(100, int(rounded)))


def percent(part: int, total: int) -> int:
    """Percentage of part in total, 0 when total is empty."""
    if total <= 0:
        return 0
    return clamp_score(part / total * 100)


class MatchResult(BaseModel):
    """
    Outcome of a single resume / job description analysis.

    Immutable: every list field is stored as a tuple. Score is clamped to
    0-100, keywords are deduplicated and a keyword never appears in both
    matched and missing lists.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    score: int = Field(default=0, ge=0, le=100, description="Compatibility score 0-100")
    matched_keywords: tuple[str, ...] = ()
    missing_keywords: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    star_format_points: tuple[str, ...] = ()
    ats_optimizations: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _normalize_keywords(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        lists = {}
        for name in KEYWORD_FIELDS:
            key = to_camel(name) if to_camel(name) in data else name
            lists[name] = (key, dedupe_keywords(_keyword_list(data.get(key))))

        matched_key, matched = lists["matched_keywords"]
        missing_key, missing = lists["missing_keywords"]
        matched_set = set(matched)

        data[matched_key] = matched
        data[missing_key] = [kw for kw in missing if kw not in matched_set]
        return data

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        if value is None:
            return 0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"score must be a number, got {type(value).__name__}")
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"score must be finite, got {value}")
        return clamp_score(value)

    @field_validator("suggestions", "star_format_points", "ats_optimizations", mode="before")
    @classmethod
    def _default_tuple(cls, value: Any) -> Any:
        return () if value is None else value


def match_by_frequency(resume_text: str, job_description: str) -> MatchResult:
    """
    Match using generic job description words.

    Every job description word of 4+ characters (stop words removed) is a
    keyword. The score is the share of job words found in the resume.

    Args:
        resume_text: Resume text (may be empty).
        job_description: Job description text (may be empty).

    Returns:
        MatchResult. Score is 0 when the job description has no keywords.
    """
    job_words = content_tokens(job_description)
    resume_words = set(clean_tokens(resume_text))

    matched = list(dict.fromkeys(word for word in job_words if word in resume_words))
    missing = list(dict.fromkeys(word for word in job_words if word not in resume_words))
    missing = missing[:FREQUENCY_MAX_MISSING]

    # * Denominator counts repeated job words, as the UI always has
    score = percent(len(matched), len(job_words))

    suggestions = []
    if missing:
        suggestions.append(f"Add {', '.join(missing[:5])} to strengthen your resume")
    suggestions.extend([QUANTIFY_TIP, ACTION_VERBS_TIP, TAILOR_SUMMARY_TIP])

    return MatchResult(
        score=score,
        matched_keywords=matched[:FREQUENCY_MAX_MATCHED],
        missing_keywords=missing,
        suggestions=suggestions,
    )


def match_by_vocabulary(resume_text: str, job_description: str) -> MatchResult:
    """
    Match using the fixed technology vocabulary.

    Args:
        resume_text: Resume text (may be empty).
        job_description: Job description text (may be empty).

    Returns:
        MatchResult. Score is 0 when the job mentions no known technology.
    """
    job_terms = find_terms(job_description)
    resume_terms = set(find_terms(resume_text))

    matched = [term for term in job_terms if term in resume_terms]
    missing = [term for term in job_terms if term not in resume_terms]

    score = percent(len(matched), len(job_terms))

    suggestions = []
    if missing:
        suggestions.append(
            f"Consider adding these technologies to your resume: {', '.join(missing[:5])}"
        )
    if matched:
        suggestions.append(f"Highlight your experience with {', '.join(matched[:3])}")
    suggestions.extend([QUANTIFY_TIP, ACTION_VERBS_TIP])

    return MatchResult(
        score=score,
        matched_keywords=matched[:VOCABULARY_MAX_MATCHED],
        missing_keywords=missing[:VOCABULARY_MAX_MISSING],
        suggestions=suggestions,
    )


_STRATEGIES = {
    MatchStrategy.FREQUENCY: match_by_frequency,
    MatchStrategy.VOCABULARY: match_by_vocabulary,
}


def resolve_strategy(value: Optional[str | MatchStrategy]) -> MatchStrategy:
    """
    Parse a strategy name.

    Args:
        value: Strategy name or enum member. None selects the default.

    Returns:
        MatchStrategy member.

    Raises:
        ValueError: If the name is unknown.
    """
    if value is None:
        return MatchStrategy.VOCABULARY
    if isinstance(value, MatchStrategy):
        return value
    return MatchStrategy(value.strip().lower())


def analyze_locally(
    resume_text: str,
    job_description: str,
    strategy: Optional[str | MatchStrategy] = None,
) -> MatchResult:
    """
    Score a resume with a local, deterministic strategy.

    Args:
        resume_text: Resume text.
        job_description: Job description text.
        strategy: Matching strategy (default: vocabulary).

    Returns:
        MatchResult.
    """
    return _STRATEGIES[resolve_strategy(strategy)](resume_text, job_description)
