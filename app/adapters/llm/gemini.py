import logging
from collections.abc import Sequence

import httpx

from app.domain.errors import (
    ExplanationServiceError,
    ExplanationTimeoutError,
    ModelNotFoundError,
    RetryableServiceError,
)
from app.ports.catalog import InteractionEvent
from app.ports.llm import LLMPort, ModelConfig
from app.prompts.templates import EXPLAIN_RECOMMENDATION, render_explanation_prompt

logger = logging.getLogger(__name__)


class GeminiLLMAdapter(LLMPort):
    """LLM adapter using the Gemini REST API (``generateContent``)."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        method: str = "generateContent",
        model_override: str | None = None,
        api_version_override: str | None = None,
        timeout: float = 15.0,
        temperature: float = EXPLAIN_RECOMMENDATION.temperature,
        max_output_tokens: int = EXPLAIN_RECOMMENDATION.max_tokens,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._method = method
        self._model_override = model_override
        self._api_version_override = api_version_override
        self._timeout = timeout
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._transport = transport

    def build_url(self, config: ModelConfig) -> str:
        """Resolve the endpoint for a configuration, applying env overrides."""
        model = self._model_override or config.model
        # accept both 'models/gemini-2.0-flash' and 'gemini-2.0-flash'
        if model.startswith("models/"):
            model = model.split("/", 1)[1]
        api_version = self._api_version_override or config.api_version
        return f"{self._base_url}/{api_version}/models/{model}:{self._method}"

    async def _generate(self, config: ModelConfig, prompt: str) -> str | None:
        """POST one generation request and extract the first candidate's text."""
        url = self.build_url(config)
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "maxOutputTokens": self._max_output_tokens,
            },
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self._api_key}

        logger.info("Gemini request: %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise ExplanationTimeoutError(f"Gemini request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise RetryableServiceError(f"Gemini transport error: {exc}") from exc

        logger.info("Gemini response status: %d", resp.status_code)
        if resp.status_code == 404:
            raise ModelNotFoundError(f"Gemini model not found at {url}: {resp.text}")
        if resp.status_code == 429 or resp.status_code >= 500:
            raise RetryableServiceError(
                f"Gemini request failed with status {resp.status_code}: {resp.text}"
            )
        if resp.is_error:
            raise ExplanationServiceError(
                f"Gemini request failed with status {resp.status_code}: {resp.text}"
            )

        try:
            data = resp.json()
        except ValueError:
            logger.warning("Gemini response body is not JSON")
            return None

        try:
            candidate = data["candidates"][0]
        except (KeyError, IndexError, TypeError):
            logger.warning("Gemini response has no candidates")
            return None
        if not isinstance(candidate, dict):
            logger.warning("Gemini candidate is not an object")
            return None
        logger.info("Gemini finish reason: %s", candidate.get("finishReason"))
        try:
            text = candidate["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        if not isinstance(text, str):
            logger.warning("Gemini response text is not a string")
            return None
        logger.info("Gemini response: %d chars", len(text))
        return text or None

    async def explain_recommendation(
        self,
        config: ModelConfig,
        product_name: str,
        product_category: str,
        user_history: Sequence[InteractionEvent],
    ) -> str | None:
        """Generate a recommendation explanation via Gemini."""
        prompt = render_explanation_prompt(product_name, product_category, user_history)
        return await self._generate(config, f"{prompt['system']}\n\n{prompt['user']}")
