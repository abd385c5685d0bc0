"""
LLM Response Parsing.

Model responses are free text that should contain a single JSON object,
possibly inside a ```json fenced block. This module locates that object and
validates it against a pydantic model.
"""

import json
import logging
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ats_matcher.errors import ResponseParseError

logger = logging.getLogger("ats_matcher.response_parser")

T = TypeVar("T", bound=BaseModel)

_FENCED_JSON_RE = re.compile(r"```json[ \t]*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_BRACED_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)

# * Raw text included in error logs is truncated to this many characters
_LOG_PREVIEW_CHARS = 300


def extract_json_payload(text: str) -> dict[str, Any]:
    """
    Extract the JSON object from a model response.

    A fenced ```json block is preferred; otherwise the span from the first
    "{" to the last "}" is used.

    Args:
        text: Raw response text.

    Returns:
        Parsed JSON object.

    Raises:
        ResponseParseError: If no JSON is found, it is malformed, or it is
            not an object.
    """
    if not text or not text.strip():
        raise ResponseParseError("Empty response text")

    fenced = _FENCED_JSON_RE.search(text)
    if fenced:
        candidate = fenced.group(1)
    else:
        braced = _BRACED_JSON_RE.search(text)
        if not braced:
            logger.error("No JSON found in response preview=%r", text[:_LOG_PREVIEW_CHARS])
            raise ResponseParseError("No JSON object found in response")
        candidate = braced.group(0)

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.error("Malformed JSON in response: %s", e)
        raise ResponseParseError(f"Malformed JSON in response: {e}") from e

    if not isinstance(payload, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(payload).__name__}")

    return payload


def decode_model(text: str, response_model: Type[T]) -> T:
    """
    Extract and validate a JSON object from a model response.

    Args:
        text: Raw response text.
        response_model: Pydantic model describing the expected payload.
            Optional fields fall back to the model's defaults.

    Returns:
        Validated model instance.

    Raises:
        ResponseParseError: If extraction or validation fails.
    """
    payload = extract_json_payload(text)

    try:
        return response_model.model_validate(payload)
    except ValidationError as e:
        logger.error(
            "Response failed validation model=%s errors=%s",
            response_model.__name__,
            e.error_count(),
        )
        raise ResponseParseError(
            f"Response does not match {response_model.__name__}: {e}"
        ) from e
