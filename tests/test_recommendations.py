"""Tests for recommendation generation: templates, completion routing and caching.

The completion backend is always the in-memory ``RecordingCompletion`` from
``conftest.py`` except in ``TestOpenAICompletionProvider``, where the LangChain
chat model is replaced with a mock.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from seo_audit.analysis import titles as t
from seo_audit.recommendations import (
    CompletionError,
    InvalidCredentialError,
    OpenAICompletionProvider,
    Prompt,
    RecommendationCache,
    RecommendationProvider,
    build_prompt,
    fallback_recommendation,
)
from seo_audit.recommendations.provider import (
    API_KEY_ERROR_MESSAGE,
    EMPTY_RESPONSE_MESSAGE,
    GENERIC_ERROR_MESSAGE,
    SYSTEM_PROMPT,
)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

class TestFallbackTemplates:
    async def test_no_credential_uses_check_template(self, offline_settings, completion) -> None:
        provider = RecommendationProvider(config=offline_settings, completion=completion)
        text = await provider.recommend(t.KEYPHRASE_IN_TITLE, "blue widgets", "Gadget Store")
        assert text == fallback_recommendation(t.KEYPHRASE_IN_TITLE, "blue widgets")
        assert text == (
            "Consider rewriting your title to include 'blue widgets', preferably at the beginning."
        )
        assert completion.prompts == []

    async def test_unmapped_check_uses_generic_sentence(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        text = await provider.recommend(t.OG_IMAGE, "widgets", "")
        assert text == (
            'Consider optimizing your content for the keyphrase "widgets" in relation to og image.'
        )

    @pytest.mark.parametrize(
        "title, expected",
        [
            (t.KEYPHRASE_IN_H1, "Include 'widgets' in your main H1 heading to improve SEO."),
            (t.INTERNAL_LINKS, "Add links to other relevant pages on your site to improve navigation and SEO."),
            (t.IMAGE_ALT_ATTRIBUTES, "Add descriptive alt text containing 'widgets' to at least one relevant image."),
        ],
    )
    def test_fallback_recommendation(self, title: str, expected: str) -> None:
        assert fallback_recommendation(title, "widgets") == expected


class TestDeterministicGenerators:
    async def test_schema_lists_suggested_types(self, gpt_settings, completion) -> None:
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        text = await provider.recommend(
            t.SCHEMA_MARKUP, "widgets", "", {"suggested_types": ["Product Schema", "FAQ Schema"]}
        )
        assert text == (
            "**Recommended Schema for this page:**\n\n"
            "• Product Schema\n• FAQ Schema\n\n"
            "Tip: Test implementations with Google's Rich Results Test tool."
        )
        assert completion.prompts == []

    async def test_image_size_lists_large_images(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        details = {
            "large_images": [
                {"src": "/hero.jpg", "label": "Hero", "size": 512 * 1024},
                {"src": "/x.png", "label": "Image with missing alt text", "size": 2 * 1024 * 1024},
            ]
        }
        text = await provider.recommend(t.IMAGE_FILE_SIZE, "widgets", "", details)
        assert text == (
            "Compress these large images to improve page load times:\n"
            "• Hero (512.0 KB)\n"
            "• Image with missing alt text (2.0 MB)\n\n"
            "Consider using tools like TinyPNG, Squoosh, or ImageOptim."
        )

    async def test_next_gen_without_images(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        text = await provider.recommend(t.NEXT_GEN_IMAGE_FORMATS, "widgets", "", {"image_count": 0})
        assert text.startswith("No images found on the page.")

    async def test_next_gen_lists_images(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        details = {"image_count": 2, "non_optimized": ["/a.png", "/b.jpg"]}
        text = await provider.recommend(t.NEXT_GEN_IMAGE_FORMATS, "widgets", "", details)
        assert "• /a.png\n• /b.jpg" in text

    async def test_density_direction(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        high = await provider.recommend(
            t.KEYPHRASE_DENSITY, "widgets", "", {"density": 4.0, "occurrences": 8, "total_words": 200}
        )
        low = await provider.recommend(
            t.KEYPHRASE_DENSITY, "widgets", "", {"density": 0.2, "occurrences": 1, "total_words": 500}
        )
        assert "Reduce repetitions" in high
        assert "Current density is 4.0%" in high
        assert "a few more times" in low

    async def test_content_length(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        text = await provider.recommend(t.CONTENT_LENGTH, "widgets", "", {"word_count": 120})
        assert "120 words" in text
        assert "180 more words" in text

    async def test_minification_lists_files(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        details = {
            "percentage": 20,
            "non_minified_js": ["https://example.com/app.js"],
            "non_minified_css": [],
            "inline_non_minified": True,
        }
        text = await provider.recommend(t.CODE_MINIFICATION, "widgets", "", details)
        assert "Only 20%" in text
        assert "• https://example.com/app.js" in text
        assert "Inline scripts or styles" in text

    async def test_hierarchy_restates_issue(self, offline_settings) -> None:
        provider = RecommendationProvider(config=offline_settings)
        text = await provider.recommend(t.HEADING_HIERARCHY, "widgets", "", {"issue": "Missing H1 heading"})
        assert text.startswith("Missing H1 heading.")


# ---------------------------------------------------------------------------
# Completion routing
# ---------------------------------------------------------------------------

class TestCompletionRouting:
    async def test_enabled_check_calls_backend(self, gpt_settings, completion) -> None:
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        text = await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "Gadget Store")

        assert text == completion.reply
        assert len(completion.prompts) == 1
        prompt = completion.prompts[0]
        assert prompt.system == SYSTEM_PROMPT
        assert prompt.user == (
            'Fix this SEO issue: "Keyphrase in Title" for keyphrase "widgets".\n'
            "Current content: Gadget Store"
        )
        assert completion.limits == [(100, 0.5)]

    async def test_check_not_enabled_uses_template(self, gpt_settings, completion) -> None:
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        text = await provider.recommend(t.INTERNAL_LINKS, "widgets", "Found 0 internal links")
        assert text == fallback_recommendation(t.INTERNAL_LINKS, "widgets")
        assert completion.prompts == []

    async def test_malformed_key_uses_template(self, gpt_settings, completion) -> None:
        gpt_settings.openai_api_key = "not-a-real-key"
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "Gadget Store")
        assert completion.prompts == []

    async def test_flag_off_uses_template(self, gpt_settings, completion) -> None:
        gpt_settings.use_gpt_recommendations = False
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "Gadget Store")
        assert completion.prompts == []

    async def test_credential_error_message_not_cached(self, gpt_settings, completion) -> None:
        completion.error = InvalidCredentialError("401 invalid api key")
        provider = RecommendationProvider(config=gpt_settings, completion=completion)

        first = await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "ctx")
        second = await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "ctx")

        assert first == second == API_KEY_ERROR_MESSAGE
        assert len(completion.prompts) == 2
        assert len(provider.cache) == 0

    async def test_other_backend_error_recovered(self, gpt_settings, completion) -> None:
        completion.error = CompletionError("rate limited")
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        text = await provider.recommend(t.KEYPHRASE_IN_H1, "widgets", "ctx")
        assert text == GENERIC_ERROR_MESSAGE

    async def test_unexpected_exception_recovered(self, gpt_settings, completion) -> None:
        completion.error = RuntimeError("boom")
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        assert await provider.recommend(t.KEYPHRASE_IN_H2, "widgets", "ctx") == GENERIC_ERROR_MESSAGE

    async def test_empty_completion(self, gpt_settings, completion) -> None:
        completion.reply = ""
        provider = RecommendationProvider(config=gpt_settings, completion=completion)
        text = await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "ctx")
        assert text == EMPTY_RESPONSE_MESSAGE
        assert len(provider.cache) == 0


class TestBuildPrompt:
    def test_long_context_truncated(self) -> None:
        prompt = build_prompt("Keyphrase in Introduction", "widgets", "x" * 400)
        assert prompt.user.endswith("Current content: " + "x" * 300 + "...")

    def test_no_context_line_when_empty(self) -> None:
        prompt = build_prompt("Keyphrase in Title", "widgets", "")
        assert "Current content" not in prompt.user


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class TestRecommendationCache:
    def test_fresh_entry_is_returned(self) -> None:
        clock = FakeClock()
        cache = RecommendationCache(ttl=86400, clock=clock)
        cache.put("Keyphrase in Title", "widgets", "ctx", "text")
        clock.now += 86399
        assert cache.get("Keyphrase in Title", "widgets", "ctx") == "text"

    def test_stale_entry_is_dropped(self) -> None:
        clock = FakeClock()
        cache = RecommendationCache(ttl=86400, clock=clock)
        cache.put("Keyphrase in Title", "widgets", "ctx", "text")
        clock.now += 86400
        assert cache.get("Keyphrase in Title", "widgets", "ctx") is None
        assert len(cache) == 0

    def test_key_uses_context_prefix(self) -> None:
        cache = RecommendationCache()
        cache.put("Keyphrase in Title", "widgets", "a" * 300 + "tail one", "text")
        assert cache.get("Keyphrase in Title", "widgets", "a" * 300 + "tail two") == "text"
        assert cache.get("Keyphrase in Title", "gadgets", "a" * 300) is None

    async def test_provider_reuses_cached_text_within_ttl(self, gpt_settings, completion) -> None:
        clock = FakeClock()
        provider = RecommendationProvider(
            config=gpt_settings,
            completion=completion,
            cache=RecommendationCache(ttl=86400, clock=clock),
        )

        first = await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "ctx")
        clock.now += 3600
        second = await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "ctx")
        assert first == second
        assert len(completion.prompts) == 1

        clock.now += 86400
        completion.reply = "Here is a better title: Widgets Reviewed"
        third = await provider.recommend(t.KEYPHRASE_IN_TITLE, "widgets", "ctx")
        assert third == "Here is a better title: Widgets Reviewed"
        assert len(completion.prompts) == 2


# ---------------------------------------------------------------------------
# OpenAI backend
# ---------------------------------------------------------------------------

def _fake_llm(result=None, error: Exception | None = None) -> MagicMock:
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=result, side_effect=error)
    return llm


class TestOpenAICompletionProvider:
    async def test_returns_stripped_content(self, gpt_settings) -> None:
        provider = OpenAICompletionProvider(gpt_settings)
        llm = _fake_llm(result=MagicMock(content="  Here is a better title: X  "))
        with patch.object(OpenAICompletionProvider, "_get_llm", return_value=llm) as get_llm:
            text = await provider.complete(Prompt(system="s", user="u"), 100, 0.5)

        assert text == "Here is a better title: X"
        get_llm.assert_called_once_with(100, 0.5)
        messages = llm.ainvoke.await_args.args[0]
        assert [m.content for m in messages] == ["s", "u"]

    async def test_authentication_error_is_invalid_credential(self, gpt_settings) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        error = openai.AuthenticationError(
            "Incorrect API key provided",
            response=httpx.Response(401, request=request),
            body=None,
        )
        provider = OpenAICompletionProvider(gpt_settings)
        with patch.object(OpenAICompletionProvider, "_get_llm", return_value=_fake_llm(error=error)):
            with pytest.raises(InvalidCredentialError):
                await provider.complete(Prompt(system="s", user="u"), 100, 0.5)

    async def test_other_errors_are_completion_errors(self, gpt_settings) -> None:
        provider = OpenAICompletionProvider(gpt_settings)
        with patch.object(
            OpenAICompletionProvider, "_get_llm", return_value=_fake_llm(error=TimeoutError("slow"))
        ):
            with pytest.raises(CompletionError) as excinfo:
                await provider.complete(Prompt(system="s", user="u"), 100, 0.5)
        assert not isinstance(excinfo.value, InvalidCredentialError)
