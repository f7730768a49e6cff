"""
Resilient explanation generation.

Each call walks an ordered list of model configurations. A configuration gets
``max_retries + 1`` attempts, and every attempt is bounded by a wall-clock
timeout. ``next_action`` is the whole fallback matrix as a pure function of the
last attempt; ``ExplanationClient.explain`` just executes it. Whatever happens,
the caller gets a non-empty string.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from app.domain.errors import (
    ExplanationServiceError,
    ExplanationTimeoutError,
    ModelNotFoundError,
    RetryableServiceError,
)
from app.ports.catalog import InteractionEvent
from app.ports.llm import LLMPort, ModelConfig
from app.prompts.templates import render_fallback_explanation

logger = logging.getLogger(__name__)

DEFAULT_CONFIGURATIONS: tuple[ModelConfig, ...] = (
    ModelConfig(model="gemini-2.0-flash", api_version="v1"),
    ModelConfig(model="gemini-2.0-flash-001", api_version="v1"),
    ModelConfig(model="gemini-2.5-flash", api_version="v1"),
    ModelConfig(model="gemini-2.5-pro", api_version="v1"),
)


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    EMPTY = "empty"
    NOT_FOUND = "not_found"
    RETRYABLE = "retryable"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class Action(str, Enum):
    RETURN_TEXT = "return_text"
    RETURN_FALLBACK = "return_fallback"
    RETRY = "retry"
    NEXT_CONFIGURATION = "next_configuration"


@dataclass
class ExplanationAttempt:
    configuration_index: int
    retry_index: int
    outcome: Outcome | None = None


def next_action(
    attempt: ExplanationAttempt, max_retries: int, configuration_count: int
) -> Action:
    """Decide what follows a finished attempt."""
    outcome = attempt.outcome
    if outcome is Outcome.SUCCEEDED:
        return Action.RETURN_TEXT
    if outcome is Outcome.EMPTY:
        return Action.RETURN_FALLBACK

    has_next_configuration = attempt.configuration_index < configuration_count - 1

    if outcome is Outcome.NOT_FOUND:
        return Action.NEXT_CONFIGURATION if has_next_configuration else Action.RETURN_FALLBACK

    if outcome in (Outcome.RETRYABLE, Outcome.TIMED_OUT):
        if attempt.retry_index < max_retries:
            return Action.RETRY
        return Action.NEXT_CONFIGURATION if has_next_configuration else Action.RETURN_FALLBACK

    return Action.RETURN_FALLBACK


class ExplanationClient:
    """Never-failing wrapper around an ``LLMPort``."""

    def __init__(
        self,
        llm: LLMPort | None,
        configurations: Sequence[ModelConfig] = DEFAULT_CONFIGURATIONS,
        max_retries: int = 2,
        timeout_seconds: float = 15.0,
        backoff_seconds: float = 0.5,
        disabled: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if not configurations:
            raise ValueError("At least one model configuration is required")
        self._llm = llm
        self._configurations = tuple(configurations)
        self._max_retries = max_retries
        self._timeout = timeout_seconds
        self._backoff = backoff_seconds
        self._disabled = disabled
        self._sleep = sleep

    def backoff_delay(self, retry_index: int) -> float:
        return self._backoff * (2 ** retry_index)

    async def explain(
        self,
        product_name: str,
        product_category: str,
        user_history: Sequence[InteractionEvent] = (),
    ) -> str:
        """Return generated text, or the template fallback when none can be obtained."""
        fallback = render_fallback_explanation(product_name, product_category)

        if self._disabled:
            logger.info("Explanation generation disabled by configuration")
            return fallback
        if self._llm is None:
            logger.warning("Explanation generation skipped: GEMINI_API_KEY not set")
            return fallback

        attempt = ExplanationAttempt(configuration_index=0, retry_index=0)
        while True:
            config = self._configurations[attempt.configuration_index]
            logger.info(
                "Explaining %s with %s (%s): attempt %d/%d, config %d/%d",
                product_name,
                config.model,
                config.api_version,
                attempt.retry_index + 1,
                self._max_retries + 1,
                attempt.configuration_index + 1,
                len(self._configurations),
            )
            attempt.outcome, text = await self._attempt(
                config, product_name, product_category, user_history
            )
            action = next_action(attempt, self._max_retries, len(self._configurations))

            if action is Action.RETURN_TEXT:
                return text
            if action is Action.RETURN_FALLBACK:
                logger.warning(
                    "Using fallback explanation for %s after %s", product_name, attempt.outcome.value
                )
                return fallback
            if action is Action.RETRY:
                delay = self.backoff_delay(attempt.retry_index)
                logger.info("Retrying %s in %.2fs", config.model, delay)
                await self._sleep(delay)
                attempt = ExplanationAttempt(
                    configuration_index=attempt.configuration_index,
                    retry_index=attempt.retry_index + 1,
                )
            else:
                logger.debug("Configuration %s exhausted, trying next configuration", config.model)
                attempt = ExplanationAttempt(
                    configuration_index=attempt.configuration_index + 1,
                    retry_index=0,
                )

    async def _attempt(
        self,
        config: ModelConfig,
        product_name: str,
        product_category: str,
        user_history: Sequence[InteractionEvent],
    ) -> tuple[Outcome, str]:
        """Run a single bounded call and classify its result."""
        try:
            text = await asyncio.wait_for(
                self._llm.explain_recommendation(
                    config, product_name, product_category, user_history
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Explanation request timed out after %.1fs", self._timeout)
            return Outcome.TIMED_OUT, ""
        except ExplanationTimeoutError as exc:
            logger.warning("%s", exc)
            return Outcome.TIMED_OUT, ""
        except ModelNotFoundError as exc:
            logger.debug("%s", exc)
            return Outcome.NOT_FOUND, ""
        except RetryableServiceError as exc:
            logger.warning("%s", exc)
            return Outcome.RETRYABLE, ""
        except ExplanationServiceError as exc:
            logger.error("Error generating explanation: %s", exc)
            return Outcome.FAILED, ""
        except Exception:
            logger.exception("Unexpected error generating explanation")
            return Outcome.FAILED, ""

        if not isinstance(text, str) or not text.strip():
            logger.warning("No explanation text found in response")
            return Outcome.EMPTY, ""
        return Outcome.SUCCEEDED, text
