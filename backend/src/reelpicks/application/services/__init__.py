"""Recommendation service — the caller-facing operation.

Builds the bilingual prompts, hands them to the dispatch orchestrator and
turns whatever text comes back into validated recommendation records.
"""

from __future__ import annotations

import structlog

from reelpicks.application.prompts import build_prompts
from reelpicks.application.recovery import parse_recommendations
from reelpicks.domain.entities import RecommendationResult
from reelpicks.domain.enums import Language
from reelpicks.domain.exceptions import ConfigError, InvalidResponseError, ValidationError
from reelpicks.shared.providers.gateway import DispatchOrchestrator

logger = structlog.get_logger(__name__)


class RecommendationService:
    """``generate_recommendations(prompt, language)`` over a pool of model backends."""

    def __init__(self, orchestrator: DispatchOrchestrator) -> None:
        self._orchestrator = orchestrator

    @property
    def orchestrator(self) -> DispatchOrchestrator:
        return self._orchestrator

    async def generate_recommendations(
        self,
        prompt: str,
        language: Language | str | None = Language.GREEK,
    ) -> RecommendationResult:
        """Generate recommendations for a free-text prompt.

        Raises:
            ValidationError: Empty prompt.
            ConfigError: No provider credentials configured at all.
            AllModelsExhaustedError: Retry after ``retry_after_seconds``.
            NetworkError: A backend call failed at the transport level.
            InvalidResponseError: The answering backend's text was unusable.
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Missing prompt")

        if not self._orchestrator.has_usable_backends:
            logger.error("recommendation_config_error")
            raise ConfigError()

        lang = Language.parse(language)
        system_prompt, user_prompt = build_prompts(prompt, lang)
        log = logger.bind(language=lang.value, prompt_length=len(prompt))

        dispatched = await self._orchestrator.dispatch(system_prompt, user_prompt)

        try:
            result = parse_recommendations(dispatched.text)
        except InvalidResponseError:
            log.error("recommendation_invalid_response", backend=dispatched.backend)
            raise

        result.backend = dispatched.backend
        result.attempts = len(dispatched.attempts)
        log.info(
            "recommendations_generated",
            backend=dispatched.backend,
            count=len(result.recommendations),
            attempts=result.attempts,
            salvaged=result.salvaged,
        )
        return result
