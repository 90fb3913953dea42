"""Result types produced by the rule engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from seo_audit.analysis.titles import Priority


@dataclass(frozen=True)
class CheckOutcome:
    """The pure verdict of one rule, before any recommendation is attached.

    ``context`` is the free-text summary handed to the recommendation layer;
    ``details`` carries structured values for the deterministic templates.
    """

    title: str
    passed: bool
    description: str
    context: str = ""
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SeoCheck:
    title: str
    description: str
    passed: bool
    recommendation: str
    priority: Priority


@dataclass(frozen=True)
class AnalysisReport:
    url: str
    checks: tuple[SeoCheck, ...]
    passed_checks: int
    failed_checks: int
    score: int

    @classmethod
    def from_checks(cls, url: str, checks: list[SeoCheck]) -> AnalysisReport:
        passed = sum(1 for check in checks if check.passed)
        failed = len(checks) - passed
        return cls(
            url=url,
            checks=tuple(checks),
            passed_checks=passed,
            failed_checks=failed,
            score=compute_score(passed, failed),
        )


def compute_score(passed: int, failed: int) -> int:
    """``round(passed / (passed + failed) * 100)``, or 0 for an empty report."""
    total = passed + failed
    if total == 0:
        return 0
    return round(passed / total * 100)
