"""JSON-over-HTTP helper shared by the upstream clients."""

import json
import logging

import httpx

from .errors import HttpError, UpstreamTimeoutError, UpstreamTransportError

logger = logging.getLogger(__name__)


def _parse_body_safely(response: httpx.Response) -> object:
    """Best-effort decode of an error body: JSON when declared, raw text otherwise."""
    text = response.text
    if "application/json" not in response.headers.get("content-type", ""):
        return text
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


async def fetch_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    json_body: object = None,
    params: dict | None = None,
    headers: dict | None = None,
    timeout: float | None = None,
) -> object:
    """Send a request and return the decoded JSON reply.

    Raises HttpError for non-2xx replies, UpstreamTimeoutError when the
    timeout elapses (the in-flight request is aborted) and
    UpstreamTransportError for other network failures.
    """
    try:
        response = await client.request(
            method,
            url,
            json=json_body,
            params=params,
            headers=headers,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
    except httpx.TimeoutException as exc:
        raise UpstreamTimeoutError(f"Request to {url} timed out", url) from exc
    except httpx.TransportError as exc:
        raise UpstreamTransportError(f"Request to {url} failed: {exc}", url) from exc

    if response.is_error:
        body = _parse_body_safely(response)
        logger.debug("%s %s -> %d", method, url, response.status_code)
        raise HttpError(
            f"Request failed with status {response.status_code}",
            response.status_code,
            str(response.url),
            body,
        )

    return response.json()
