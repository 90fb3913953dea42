"""Wire schemas for an :class:`AnalysisReport`.

Shared by the HTTP API and the CLI's ``--json`` output so both emit the same
camelCase document.
"""

from __future__ import annotations

from dataclasses import asdict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from seo_audit.analysis.models import AnalysisReport
from seo_audit.analysis.titles import Priority


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SeoCheckOut(CamelModel):
    title: str
    description: str
    passed: bool
    recommendation: str
    priority: Priority


class AnalysisReportOut(CamelModel):
    url: str
    checks: list[SeoCheckOut]
    passed_checks: int
    failed_checks: int
    score: int


def report_response(report: AnalysisReport) -> AnalysisReportOut:
    return AnalysisReportOut(
        url=report.url,
        checks=[SeoCheckOut(**asdict(check)) for check in report.checks],
        passed_checks=report.passed_checks,
        failed_checks=report.failed_checks,
        score=report.score,
    )
