"""End-to-end analysis of one URL against one keyphrase.

Stages run strictly in order and any failure short-circuits the rest::

    input check -> gate.validate -> gate.resolve_and_check_ip
                -> extractor.extract -> engine.evaluate -> report

Each stage returns either its result or a :class:`PipelineError`; the
orchestrator returns the first error unchanged, so callers never see a
partial report.
"""

from __future__ import annotations

import logging
import time

import httpx

from seo_audit.analysis.engine import SeoRuleEngine
from seo_audit.analysis.models import AnalysisReport
from seo_audit.config import Settings, settings as default_settings
from seo_audit.errors import PipelineError
from seo_audit.recommendations.cache import RecommendationCache
from seo_audit.recommendations.completion import CompletionProvider, OpenAICompletionProvider
from seo_audit.recommendations.provider import RecommendationProvider
from seo_audit.scraper.extractor import ContentExtractor
from seo_audit.security.allowlist import DomainAllowlist
from seo_audit.security.gate import UrlSecurityGate, is_homepage

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    def __init__(
        self,
        gate: UrlSecurityGate,
        extractor: ContentExtractor,
        engine: SeoRuleEngine,
    ) -> None:
        self.gate = gate
        self.extractor = extractor
        self.engine = engine

    async def analyze(self, url: str, keyphrase: str) -> AnalysisReport | PipelineError:
        """Run the full pipeline and return a report or the first stage error."""
        if not isinstance(url, str) or not isinstance(keyphrase, str):
            return PipelineError.validation("URL and keyphrase are required")
        url, keyphrase = url.strip(), keyphrase.strip()
        if not url or not keyphrase:
            return PipelineError.validation("URL and keyphrase are required")

        started = time.monotonic()

        checked = self.gate.validate(url)
        if isinstance(checked, PipelineError):
            return checked

        resolved = await self.gate.resolve_and_check_ip(checked.normalized_url)
        if isinstance(resolved, PipelineError):
            return resolved

        target = resolved.normalized_url
        try:
            content = await self.extractor.extract(target)
            if isinstance(content, PipelineError):
                return content
            checks = await self.engine.evaluate(content, keyphrase, target, is_homepage(target))
        except Exception as exc:
            logger.exception("Analysis of %s failed", target)
            return PipelineError.analysis(f"Failed to analyze webpage: {exc}")

        report = AnalysisReport.from_checks(target, checks)

        logger.info(
            "Analysed %s for %r: score %d (%d passed, %d failed) in %.2fs",
            target,
            keyphrase,
            report.score,
            report.passed_checks,
            report.failed_checks,
            time.monotonic() - started,
        )
        return report


def build_orchestrator(
    config: Settings,
    client: httpx.AsyncClient,
    allowlist: DomainAllowlist,
    completion: CompletionProvider | None = None,
) -> AnalysisOrchestrator:
    """Wire the full service graph from explicit collaborators.

    When *completion* is ``None`` and GPT recommendations are enabled with a
    valid key, an :class:`OpenAICompletionProvider` is created.
    """
    if completion is None and config.gpt_enabled:
        completion = OpenAICompletionProvider(config)

    gate = UrlSecurityGate(allowlist, enforce_allowlist=config.enforce_domain_allowlist)
    recommender = RecommendationProvider(
        config=config,
        completion=completion,
        cache=RecommendationCache(ttl=config.recommendation_cache_ttl),
    )
    return AnalysisOrchestrator(
        gate=gate,
        extractor=ContentExtractor(client, gate, image_timeout=config.image_request_timeout),
        engine=SeoRuleEngine(recommender),
    )


def log_recommendation_status(config: Settings | None = None) -> None:
    """Log whether recommendations will use the completion backend."""
    config = config or default_settings
    logger.info(
        "GPT recommendations: %s", "enabled" if config.use_gpt_recommendations else "disabled"
    )
    logger.info(
        "OpenAI API key: %s",
        "provided" if config.has_valid_openai_key else "not provided or invalid",
    )
    if config.use_gpt_recommendations and not config.has_valid_openai_key:
        logger.warning(
            "GPT recommendations are enabled but no valid OpenAI API key was provided; "
            "fallback recommendations will be used."
        )
    elif config.gpt_enabled:
        logger.info("Enabled GPT checks: %s", ", ".join(config.enabled_gpt_checks))
