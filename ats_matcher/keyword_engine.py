"""
Technology Vocabulary Engine.

Holds the fixed vocabulary of known technical terms and finds which of
them appear in a text using whole-term, case-insensitive matching.
"""

import logging
import re
from typing import Iterable

logger = logging.getLogger("ats_matcher.keyword_engine")


# * Known technologies grouped by category. Order is preserved in results.
TECH_VOCABULARY: dict[str, tuple[str, ...]] = {
    "languages": (
        "python", "java", "javascript", "typescript", "c++", "c#", "golang",
        "rust", "ruby", "php", "swift", "kotlin", "scala", "sql", "bash",
        "html", "css",
    ),
    "frameworks": (
        "react", "react native", "angular", "vue.js", "next.js", "node.js",
        "express.js", "django", "flask", "fastapi", "spring boot", ".net",
        "ruby on rails", "graphql", "tailwind css",
    ),
    "databases": (
        "postgresql", "mysql", "mongodb", "redis", "elasticsearch", "dynamodb",
        "sqlite", "cassandra", "oracle", "snowflake",
    ),
    "cloud_devops": (
        "aws", "azure", "gcp", "google cloud", "docker", "kubernetes",
        "terraform", "ansible", "jenkins", "ci/cd", "github actions", "linux",
        "serverless", "microservices",
    ),
    "tools": (
        "git", "jira", "kafka", "rabbitmq", "airflow", "spark", "hadoop",
        "tableau", "power bi", "figma", "postman", "nginx",
    ),
    "methodologies": (
        "agile", "scrum", "kanban", "devops", "tdd", "rest api", "restful",
        "object-oriented", "design patterns", "system design",
    ),
    "ml_data": (
        "machine learning", "deep learning", "tensorflow", "pytorch",
        "scikit-learn", "pandas", "numpy", "nlp", "computer vision", "llm",
        "data analysis", "data visualization", "statistics",
    ),
}

# * Flatten vocabulary, keeping category order and dropping duplicates
ALL_TECH_TERMS: tuple[str, ...] = tuple(dict.fromkeys(
    term for terms in TECH_VOCABULARY.values() for term in terms
))

# * "+", "#" and "-" count as part of a term on both sides, so "java" never
# * matches inside "javascript" and "sql" never inside "t-sql". A "." may
# * precede a term ("done.Python"), and a term starting with a symbol may
# * follow a letter ("ASP.NET"). Words of a phrase may be joined by hyphens.
_WORD_BOUNDARY_BEFORE = r"(?<![\w+#-])"
_SYMBOL_BOUNDARY_BEFORE = r"(?<![.+#-])"
_BOUNDARY_AFTER = r"(?![\w+#-])"
_PHRASE_SEPARATOR = r"[\s-]+"


def _compile_term(term: str) -> re.Pattern | None:
    body = _PHRASE_SEPARATOR.join(re.escape(part) for part in term.split())
    before = _WORD_BOUNDARY_BEFORE if term[:1].isalnum() else _SYMBOL_BOUNDARY_BEFORE
    try:
        return re.compile(f"{before}{body}{_BOUNDARY_AFTER}", re.IGNORECASE)
    except re.error as e:
        logger.warning("Skipping vocabulary term=%r invalid pattern: %s", term, e)
        return None


def compile_vocabulary(terms: Iterable[str]) -> tuple[tuple[str, re.Pattern], ...]:
    """
    Compile vocabulary terms into whole-term regex patterns.

    Args:
        terms: Terms to compile, in the order results should be reported.

    Returns:
        Tuple of (term, pattern) pairs. Terms that fail to compile are skipped.
    """
    compiled = []
    for term in terms:
        pattern = _compile_term(term)
        if pattern is not None:
            compiled.append((term, pattern))
    return tuple(compiled)


_TERM_PATTERNS = compile_vocabulary(ALL_TECH_TERMS)

_TERM_CATEGORY: dict[str, str] = {
    term: category
    for category, terms in TECH_VOCABULARY.items()
    for term in terms
}


def find_terms(text: str, patterns=None) -> list[str]:
    """
    Find vocabulary terms present in a text.

    Args:
        text: Text to search.
        patterns: Optional compiled vocabulary (defaults to the built-in one).

    Returns:
        Terms found, in vocabulary order.
    """
    if not text:
        return []

    patterns = _TERM_PATTERNS if patterns is None else patterns
    return [term for term, pattern in patterns if pattern.search(text)]


def categorize_keywords(keywords: Iterable[str]) -> dict[str, list[str]]:
    """
    Group keywords by vocabulary category.

    Args:
        keywords: Keywords to group.

    Returns:
        Dictionary mapping category name to keywords. Keywords outside the
        vocabulary go to "other". Empty categories are omitted.
    """
    grouped: dict[str, list[str]] = {}

    for keyword in keywords:
        category = _TERM_CATEGORY.get(keyword.lower(), "other")
        bucket = grouped.setdefault(category, [])
        if keyword not in bucket:
            bucket.append(keyword)

    return grouped


def get_category_terms(category: str) -> list[str]:
    """
    Get vocabulary terms for a category.

    Args:
        category: Category name (languages, frameworks, databases, ...).

    Returns:
        List of terms for the category, empty if unknown.
    """
    return list(TECH_VOCABULARY.get(category, ()))
