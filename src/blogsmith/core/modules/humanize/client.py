"""Rephrasy humanizer API client."""

import httpx
import structlog

from blogsmith.core.modules.humanize.models import HumanizeResult
from blogsmith.errors import ProviderError

logger = structlog.get_logger(__name__)

REQUEST_TIMEOUT = 120.0


async def request_humanize(
    api_url: str, api_key: str, model: str, text: str, transport: httpx.AsyncBaseTransport | None = None
) -> HumanizeResult:
    """Send text to Rephrasy and return the parsed response.

    Raises:
        ProviderError: when the API answers with a non-2xx status or cannot be reached
    """
    payload = {"text": text, "model": model, "words": True, "costs": True}
    headers = {"Authorization": f"Bearer {api_key}"}
    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=transport) as client:
            response = await client.post(api_url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.warning("rephrasy_request_failed", error=str(e))
        raise ProviderError("Rephrasy API is unreachable") from e

    if response.is_error:
        logger.warning("rephrasy_error_response", status_code=response.status_code)
        raise ProviderError(f"Rephrasy API error: {response.text}", status_code=response.status_code)

    return HumanizeResult.model_validate(response.json())
