"""Shared fixtures.

``offline_settings`` pins every option the pipeline reads so that a developer's
own ``.env`` (an OpenAI key, a populated allowlist) never leaks into a test.
"""

from __future__ import annotations

import pytest

from seo_audit.analysis.models import AnalysisReport, SeoCheck
from seo_audit.config import DEFAULT_GPT_CHECKS, Settings
from seo_audit.recommendations.completion import CompletionProvider, Prompt


class RecordingCompletion(CompletionProvider):
    """In-memory completion backend that records every prompt it receives."""

    def __init__(self, reply: str = "Here is a better title: Blue Widgets Guide") -> None:
        self.reply = reply
        self.error: Exception | None = None
        self.prompts: list[Prompt] = []
        self.limits: list[tuple[int, float]] = []

    @property
    def name(self) -> str:
        return "Recording"

    async def complete(self, prompt: Prompt, max_output_tokens: int, temperature: float) -> str:
        self.prompts.append(prompt)
        self.limits.append((max_output_tokens, temperature))
        if self.error is not None:
            raise self.error
        return self.reply


def _settings(**overrides) -> Settings:
    values = dict(
        enforce_domain_allowlist=True,
        allowed_domains=[],
        use_gpt_recommendations=False,
        openai_api_key="",
        openai_chat_model="gpt-4o-mini",
        enabled_gpt_checks=list(DEFAULT_GPT_CHECKS),
        recommendation_cache_ttl=86400.0,
        recommendation_max_tokens=100,
        recommendation_temperature=0.5,
        request_timeout=5.0,
        image_request_timeout=2.0,
        log_level="INFO",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def offline_settings() -> Settings:
    """GPT recommendations off, no key, allowlist enforced and empty."""
    return _settings()


@pytest.fixture()
def gpt_settings() -> Settings:
    """GPT recommendations on with a well-formed key."""
    return _settings(use_gpt_recommendations=True, openai_api_key="sk-test-key")


@pytest.fixture()
def completion() -> RecordingCompletion:
    return RecordingCompletion()


@pytest.fixture()
def sample_report() -> AnalysisReport:
    """A two-check report: one pass, one high-priority failure (score 50)."""
    return AnalysisReport.from_checks(
        "https://example.com/blue-widgets",
        [
            SeoCheck(
                title="Keyphrase in Title",
                description="Great job! Your title includes the target keyphrase.",
                passed=True,
                recommendation="",
                priority="high",
            ),
            SeoCheck(
                title="Keyphrase in H1 Heading",
                description="Your page is missing an H1 heading. Add an H1 heading that includes your keyphrase.",
                passed=False,
                recommendation="Include 'blue widgets' in your main H1 heading to improve SEO.",
                priority="high",
            ),
        ],
    )
