"""Utilities for rendering SEO reports in the CLI."""

from __future__ import annotations

import json
from typing import List

from seo_audit.analysis.models import AnalysisReport, SeoCheck
from seo_audit.analysis.schemas import report_response
from seo_audit.errors import PipelineError

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def render_report(report: AnalysisReport) -> str:
    """Render *report* as a checklist: summary, passed checks, then failures by priority.

    Returns:
        Multi-line string ready for ``typer.echo``.
    """
    lines: List[str] = [
        f"SEO report for {report.url}",
        f"Score: {report.score}/100  ({report.passed_checks} passed, {report.failed_checks} failed)",
        "",
    ]

    passed = [c for c in report.checks if c.passed]
    failed = sorted(
        (c for c in report.checks if not c.passed),
        key=lambda c: _PRIORITY_ORDER.get(c.priority, 1),
    )

    for check in passed:
        lines.append(f"✅ {check.title}")

    if failed:
        lines.append("")
    for check in failed:
        lines.extend(_render_failure(check))

    return "\n".join(lines)


def _render_failure(check: SeoCheck) -> List[str]:
    lines = [f"❌ {check.title} [{check.priority}]", f"   {check.description}"]
    if check.recommendation:
        for rec_line in check.recommendation.splitlines():
            lines.append(f"   → {rec_line}" if rec_line.strip() else "")
    lines.append("")
    return lines


def render_json(report: AnalysisReport) -> str:
    """The report in the same camelCase JSON shape the HTTP API returns."""
    return json.dumps(report_response(report).model_dump(by_alias=True), indent=2)


def render_error(error: PipelineError) -> str:
    return f"[{error.category.value}] {error.message}"
