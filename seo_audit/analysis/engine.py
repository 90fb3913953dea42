"""Runs every rule against one page and attaches recommendations."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from seo_audit.analysis.models import SeoCheck
from seo_audit.analysis.rules import RULES, Rule, RuleContext, success_message
from seo_audit.analysis.titles import priority_for
from seo_audit.scraper.models import ScrapedContent

logger = logging.getLogger(__name__)


class Recommender(Protocol):
    async def recommend(
        self,
        check_title: str,
        keyphrase: str,
        context: str,
        details: Mapping[str, Any] | None = None,
    ) -> str: ...


class SeoRuleEngine:
    """Evaluates the on-page checks in a fixed order.

    Rules are pure; the only awaited work is recommendation generation for
    checks that fail.
    """

    def __init__(self, recommender: Recommender, rules: tuple[Rule, ...] = RULES) -> None:
        self._recommender = recommender
        self._rules = rules

    @property
    def recommender(self) -> Recommender:
        return self._recommender

    async def evaluate(
        self,
        content: ScrapedContent,
        keyphrase: str,
        url: str,
        is_home_page: bool,
    ) -> list[SeoCheck]:
        ctx = RuleContext(
            content=content, keyphrase=keyphrase, url=url, is_home_page=is_home_page
        )
        checks: list[SeoCheck] = []

        for rule in self._rules:
            outcome = rule(ctx)
            if outcome.passed:
                description = success_message(outcome.title, is_home_page, outcome.description)
                recommendation = ""
            else:
                description = outcome.description
                recommendation = await self._recommender.recommend(
                    outcome.title, keyphrase, outcome.context, outcome.details
                )

            checks.append(
                SeoCheck(
                    title=outcome.title,
                    description=description,
                    passed=outcome.passed,
                    recommendation=recommendation,
                    priority=priority_for(outcome.title),
                )
            )

        failed = sum(1 for check in checks if not check.passed)
        logger.info("Evaluated %d checks for %s (%d failed)", len(checks), url, failed)
        return checks
