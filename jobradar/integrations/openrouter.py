"""OpenRouter chat-completion client (OpenAI-compatible wire format)."""

import logging

import httpx

from ..http import fetch_json
from ..retry import is_retryable_upstream_error, log_retry, with_retry

logger = logging.getLogger(__name__)


class OpenRouterClient:
    """Thin client for ``POST /chat/completions`` with retry on transient failures."""

    def __init__(self, api_key: str, base_url: str, http_client: httpx.AsyncClient) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http = http_client

    async def chat_completion(
        self,
        request: dict,
        *,
        retries: int = 3,
        timeout: float = 30.0,
        min_delay: float = 0.25,
    ) -> dict:
        """Send a chat-completion request and return the decoded reply.

        ``request`` carries ``model``, ``messages`` and sampling options.
        """
        url = f"{self._base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self._api_key}"}

        async def _attempt(attempt: int) -> dict:
            logger.debug("OpenRouter call model=%s attempt=%d", request.get("model"), attempt)
            return await fetch_json(
                self._http,
                "POST",
                url,
                json_body=request,
                headers=headers,
                timeout=timeout,
            )

        return await with_retry(
            _attempt,
            retries=retries,
            min_delay=min_delay,
            should_retry=is_retryable_upstream_error,
            on_retry=log_retry("OpenRouter chat completion"),
        )
