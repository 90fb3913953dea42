"""Chooses and produces the remediation text for a failed check.

Resolution order for one check:

1. Technical checks (``DETERMINISTIC_CHECKS``) use their data-driven
   generator.
2. Checks listed in ``enabled_gpt_checks`` go to the completion backend when
   it is switched on and a plausible key is configured.  Results are cached
   per ``(check, keyphrase, context[:300])``.
3. Everything else uses the fallback template for the check, or a generic
   sentence.

``recommend`` never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from seo_audit.analysis.titles import DETERMINISTIC_CHECKS
from seo_audit.config import Settings, settings as default_settings
from seo_audit.recommendations.cache import CONTEXT_KEY_LENGTH, RecommendationCache
from seo_audit.recommendations.completion import (
    CompletionProvider,
    InvalidCredentialError,
    Prompt,
)
from seo_audit.recommendations.templates import (
    DETERMINISTIC_GENERATORS,
    fallback_recommendation,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an SEO expert providing concise, actionable recommendations. "
    "Keep responses under 100 words. "
    'Format: "Here is a better [element]: [example]" '
    "Avoid quotation marks."
)

EMPTY_RESPONSE_MESSAGE = "Unable to generate recommendation at this time."
API_KEY_ERROR_MESSAGE = (
    "API key error. Please check your OpenAI API key and ensure it's valid."
)
GENERIC_ERROR_MESSAGE = "Unable to generate recommendation. Please try again later."


def build_prompt(check_title: str, keyphrase: str, context: str) -> Prompt:
    user = f'Fix this SEO issue: "{check_title}" for keyphrase "{keyphrase}".'
    if context:
        truncated = (
            context[:CONTEXT_KEY_LENGTH] + "..."
            if len(context) > CONTEXT_KEY_LENGTH
            else context
        )
        user += f"\nCurrent content: {truncated}"
    return Prompt(system=SYSTEM_PROMPT, user=user)


class RecommendationProvider:
    """Produces the ``recommendation`` string for failed checks.

    Args:
        config: Source of the GPT flags, key, model and token/temperature
            limits.  Defaults to the module-level ``settings``.
        completion: Backend used for AI-assisted recommendations.  ``None``
            disables that path entirely.
        cache: Shared cache of generated text.
    """

    def __init__(
        self,
        config: Settings | None = None,
        completion: CompletionProvider | None = None,
        cache: RecommendationCache | None = None,
    ) -> None:
        self._settings = config or default_settings
        self._completion = completion
        self._cache = cache or RecommendationCache(ttl=self._settings.recommendation_cache_ttl)

    @property
    def cache(self) -> RecommendationCache:
        return self._cache

    def uses_completion(self, check_title: str) -> bool:
        return (
            self._completion is not None
            and self._settings.gpt_enabled
            and check_title in self._settings.enabled_gpt_checks
            and check_title not in DETERMINISTIC_CHECKS
        )

    async def recommend(
        self,
        check_title: str,
        keyphrase: str,
        context: str = "",
        details: Mapping[str, Any] | None = None,
    ) -> str:
        generator = DETERMINISTIC_GENERATORS.get(check_title)
        if generator is not None:
            return generator(keyphrase, details or {})

        if self.uses_completion(check_title):
            return await self._complete(self._completion, check_title, keyphrase, context)

        return fallback_recommendation(check_title, keyphrase)

    async def _complete(
        self, completion: CompletionProvider, check_title: str, keyphrase: str, context: str
    ) -> str:
        cached = self._cache.get(check_title, keyphrase, context)
        if cached is not None:
            logger.debug("Recommendation cache hit for %r", check_title)
            return cached

        prompt = build_prompt(check_title, keyphrase, context)
        try:
            text = await completion.complete(
                prompt,
                max_output_tokens=self._settings.recommendation_max_tokens,
                temperature=self._settings.recommendation_temperature,
            )
        except InvalidCredentialError as exc:
            logger.error("%s rejected the API key: %s", completion.name, exc)
            return API_KEY_ERROR_MESSAGE
        except Exception as exc:
            logger.error("%s completion failed for %r: %s", completion.name, check_title, exc)
            return GENERIC_ERROR_MESSAGE

        if not text:
            return EMPTY_RESPONSE_MESSAGE

        self._cache.put(check_title, keyphrase, context, text)
        return text
