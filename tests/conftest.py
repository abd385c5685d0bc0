import json
from typing import Callable, Union

import pytest

VOCAB_JOB = "We need a React and Node.js developer with AWS experience"
VOCAB_RESUME = "Built backend services using Node.js and deployed on AWS"

LONG_JOB = (
    "We are hiring a backend engineer. You will build Python services with "
    "Django and PostgreSQL, deploy them with Docker on AWS, and work with "
    "React developers on the frontend."
)
LONG_RESUME = (
    "Jane Doe\nBackend engineer with five years of Python and Django.\n"
    "Shipped APIs on PostgreSQL and containerized them with Docker."
)


Reply = Union[str, Exception, Callable[[str], str]]


class FakeLLMClient:
    """
    Stands in for LLMClient: records prompts and returns canned replies.

    reply may be a string, an exception instance to raise, or a callable
    mapping the prompt to a string (it may raise too).
    """

    def __init__(self, reply: Reply = ""):
        self.reply = reply
        self.prompts: list[str] = []
        self.configs: list = []

    def _answer(self, prompt: str, config) -> str:
        self.prompts.append(prompt)
        self.configs.append(config)
        if isinstance(self.reply, Exception):
            raise self.reply
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply

    def generate(self, prompt: str, config=None) -> str:
        return self._answer(prompt, config)

    async def generate_async(self, prompt: str, config=None) -> str:
        return self._answer(prompt, config)


@pytest.fixture
def make_llm() -> Callable[..., FakeLLMClient]:
    """Factory fixture: make_llm(reply) -> FakeLLMClient."""
    return FakeLLMClient


@pytest.fixture
def ai_reply() -> Callable[..., str]:
    """
    Returns a function building an analysis reply wrapped in a ```json block,
    the way models usually answer.
    """
    def _reply(score=80, matched=None, missing=None, **extra) -> str:
        payload = {
            "score": score,
            "matchedKeywords": matched if matched is not None else ["python"],
            "missingKeywords": missing if missing is not None else ["kubernetes"],
            "suggestions": ["Mention Kubernetes"],
            "starFormatPoints": ["Led a migration that cut costs by 20%"],
            "atsOptimizations": ["Use standard section headings"],
        }
        payload.update(extra)
        return f"Here is the analysis:\n```json\n{json.dumps(payload)}\n```"
    return _reply


@pytest.fixture
def clear_llm_env(monkeypatch):
    """Remove every environment variable that could supply an API key."""
    for var in ("LLM_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY", "APOLLO_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def reply_json(payload: dict, fenced: bool = True) -> str:
    body = json.dumps(payload)
    return f"```json\n{body}\n```" if fenced else body
