"""Vacancy scoring via the upstream chat model.

Builds the fixed prompt, calls OpenRouter and turns the reply into a
validated LlmVacancyAnalysis. Every way the reply can be unusable is
reported as UPSTREAM_BAD_RESPONSE; ``details["cause"]`` tells them apart.
"""

import json
import logging
import re

from pydantic import ValidationError

from ..errors import AnalyzerError, ErrorKind
from ..integrations.openrouter import OpenRouterClient
from ..prompts import build_vacancy_analysis_messages
from .schemas import LlmVacancyAnalysis

logger = logging.getLogger(__name__)

_OPENING_FENCE_RE = re.compile(r"^```[a-zA-Z]*\n?")
_CLOSING_FENCE_RE = re.compile(r"\n?```$")


def _bad_response(message: str, cause: str, **extra: object) -> AnalyzerError:
    return AnalyzerError(message, ErrorKind.UPSTREAM_BAD_RESPONSE, {"cause": cause, **extra})


def extract_json_object(text: str) -> str:
    """Return the ``{...}`` span of a model reply, unwrapping a markdown fence first."""
    trimmed = text.strip()

    if trimmed.startswith("```"):
        without_fence = _CLOSING_FENCE_RE.sub("", _OPENING_FENCE_RE.sub("", trimmed, count=1), count=1)
        return extract_json_object(without_fence)

    start, end = trimmed.find("{"), trimmed.rfind("}")
    if start == -1 or end <= start:
        raise _bad_response("LLM response does not contain a JSON object", "malformed_json")

    return trimmed[start : end + 1]


def parse_model_reply(content: str | None) -> LlmVacancyAnalysis:
    """Validate the raw message content against the strict analysis schema."""
    if not content or not content.strip():
        raise _bad_response("Upstream model returned an empty response", "empty_response")

    try:
        parsed = json.loads(extract_json_object(content))
    except json.JSONDecodeError as exc:
        raise _bad_response("Failed to parse LLM JSON response", "malformed_json", error=str(exc)) from exc

    try:
        return LlmVacancyAnalysis.model_validate(parsed)
    except ValidationError as exc:
        raise _bad_response(
            "LLM JSON response does not match the expected schema",
            "schema_validation",
            errors=exc.errors(include_url=False, include_context=False),
        ) from exc


def _message_content(response: dict) -> str | None:
    choices = response.get("choices") if isinstance(response, dict) else None
    if not choices:
        return None
    message = choices[0].get("message") or {}
    return message.get("content")


class VacancyModelCaller:
    """Calls the chat model for one description and returns its validated scores."""

    def __init__(
        self,
        client: OpenRouterClient,
        model: str,
        *,
        max_tokens: int = 600,
        timeout: float = 45.0,
        retries: int = 2,
    ) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._retries = retries

    async def __call__(self, description: str) -> LlmVacancyAnalysis:
        response = await self._client.chat_completion(
            {
                "model": self._model,
                "temperature": 0,
                "max_tokens": self._max_tokens,
                "messages": build_vacancy_analysis_messages(description),
            },
            retries=self._retries,
            timeout=self._timeout,
        )

        content = _message_content(response)
        try:
            return parse_model_reply(content)
        except AnalyzerError:
            logger.warning(
                "Unusable model reply (model=%s, response_len=%d, first_100=%r)",
                self._model,
                len(content or ""),
                (content or "")[:100],
            )
            raise
