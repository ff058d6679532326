import json
import logging
from typing import Any

import httpx

from kidlit.assistant.base import ContentGenerator
from kidlit.core.config import Settings
from kidlit.core.exceptions import (
    ProviderAPIError,
    ProviderConfigurationError,
    ProviderDecodeError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT_SECONDS = 30.0


def build_prompt_body(content: str) -> dict:
    return {"contents": [{"parts": [{"text": content}]}]}


def extract_generated_text(payload: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` if the payload has it."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text


def _decode_body(response: httpx.Response) -> Any:
    # The raw text is read first so it can be reported when it is not JSON.
    raw = response.text
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse response from %s: %s", response.url.host, e)
        raise ProviderDecodeError(raw) from e


async def _post(
    url: str,
    *,
    body: dict,
    params: dict | None,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None,
) -> httpx.Response:
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            return await client.post(url, params=params, json=body)
    except httpx.TimeoutException as e:
        raise ProviderUnavailableError(
            f"No response within {timeout:g}s", timed_out=True
        ) from e
    except httpx.RequestError as e:
        raise ProviderUnavailableError(f"Request failed: {e.__class__.__name__}") from e


class GeminiClient(ContentGenerator):
    """Calls the Gemini generateContent endpoint directly.

    One attempt per call; failures are raised, never retried.
    """

    def __init__(
        self,
        api_key: str | None,
        model_name: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "GeminiClient":
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model_name=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:generateContent"

    async def generate(self, content: str) -> Any:
        if not self.api_key:
            raise ProviderConfigurationError("GEMINI_API_KEY is not set")

        logger.info("Sending request to Gemini model %s...", self.model_name)
        response = await _post(
            self.endpoint,
            body=build_prompt_body(content),
            params={"key": self.api_key},
            timeout=self.timeout,
            transport=self.transport,
        )
        data = _decode_body(response)

        if response.is_error:
            logger.error("Gemini API error (status %s): %s", response.status_code, data)
            raise ProviderAPIError(response.status_code, data)

        logger.info("Successfully got response from Gemini model %s.", self.model_name)
        return data


class GatewayClient(ContentGenerator):
    """Generates content through the backend's /api/generate-content route.

    Keeps the provider credential on the server.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def generate(self, content: str) -> Any:
        response = await _post(
            f"{self.base_url}/api/generate-content",
            body={"content": content},
            params=None,
            timeout=self.timeout,
            transport=self.transport,
        )
        data = _decode_body(response)
        if response.is_error:
            raise ProviderAPIError(response.status_code, data)
        return data
