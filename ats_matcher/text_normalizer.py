"""
Text Normalization.

Turns raw resume / job description text into comparable lowercase tokens.
No stemming or lemmatization is applied.
"""

import re

MIN_TOKEN_LENGTH = 4

# * Filler words dropped from job descriptions before keyword extraction
STOP_WORDS = frozenset({
    "with", "and", "the", "for", "this", "that", "will", "from", "have",
    "would", "should", "could", "must", "about", "into", "through", "during",
})

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_tokens(text: str) -> list[str]:
    """
    Lowercase, strip punctuation and split text into tokens.

    Tokens shorter than MIN_TOKEN_LENGTH characters are discarded.
    Order and duplicates are preserved.

    Args:
        text: Raw input text.

    Returns:
        List of tokens (empty for empty input).
    """
    if not text:
        return []

    cleaned = _PUNCTUATION_RE.sub(" ", text.lower())
    return [word for word in _WHITESPACE_RE.split(cleaned) if len(word) >= MIN_TOKEN_LENGTH]


def content_tokens(text: str) -> list[str]:
    """Tokens of text with stop words removed."""
    return [word for word in clean_tokens(text) if word not in STOP_WORDS]


def normalize_keyword(keyword: str) -> str:
    return " ".join(keyword.lower().split())


def dedupe_keywords(keywords) -> list[str]:
    """
    Normalize and deduplicate keywords, keeping first-seen order.

    Empty entries are dropped.
    """
    seen = set()
    unique = []
    for keyword in keywords:
        normalized = normalize_keyword(keyword)
        if normalized and normalized not in seen:
            seen.add(normalized)
            unique.append(normalized)
    return unique
