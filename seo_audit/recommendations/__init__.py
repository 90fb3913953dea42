"""Recommendations package — completion backend, cache and templates."""

from seo_audit.recommendations.cache import RecommendationCache
from seo_audit.recommendations.completion import (
    CompletionError,
    CompletionProvider,
    InvalidCredentialError,
    OpenAICompletionProvider,
    Prompt,
)
from seo_audit.recommendations.provider import RecommendationProvider, build_prompt
from seo_audit.recommendations.templates import fallback_recommendation, generic_recommendation

__all__ = [
    "CompletionError",
    "CompletionProvider",
    "InvalidCredentialError",
    "OpenAICompletionProvider",
    "Prompt",
    "RecommendationCache",
    "RecommendationProvider",
    "build_prompt",
    "fallback_recommendation",
    "generic_recommendation",
]
