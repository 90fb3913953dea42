"""Analysis package — the on-page rule set and the engine that runs it."""

from seo_audit.analysis.engine import SeoRuleEngine
from seo_audit.analysis.models import AnalysisReport, CheckOutcome, SeoCheck, compute_score
from seo_audit.analysis.rules import (
    RULES,
    RuleContext,
    calculate_keyphrase_density,
    suggest_schema_types,
)
from seo_audit.analysis.titles import CHECK_PRIORITIES, DETERMINISTIC_CHECKS, priority_for

__all__ = [
    "AnalysisReport",
    "CHECK_PRIORITIES",
    "CheckOutcome",
    "DETERMINISTIC_CHECKS",
    "RULES",
    "RuleContext",
    "SeoCheck",
    "SeoRuleEngine",
    "calculate_keyphrase_density",
    "compute_score",
    "priority_for",
    "suggest_schema_types",
]
