"""Tests for the ``seo-audit`` CLI."""

import json
import subprocess
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from cli.main import app
from seo_audit.errors import PipelineError
from seo_audit.security.allowlist import DomainAllowlist

runner = CliRunner()


@pytest.fixture
def fake_build():
    """Patch the pipeline factory so no page is fetched."""
    orchestrator = MagicMock()
    orchestrator.analyze = AsyncMock()
    with patch("cli.main.build_orchestrator", return_value=orchestrator) as build, \
            patch("cli.main.configure_logging"):
        yield build


def test_analyze_prints_checklist(fake_build, sample_report):
    fake_build.return_value.analyze.return_value = sample_report

    result = runner.invoke(app, ["analyze", "example.com/blue-widgets", "blue widgets"])

    assert result.exit_code == 0, result.output
    assert "SEO report for https://example.com/blue-widgets" in result.output
    assert "Score: 50/100" in result.output
    assert "✅ Keyphrase in Title" in result.output
    assert "❌ Keyphrase in H1 Heading [high]" in result.output
    assert "→ Include 'blue widgets' in your main H1 heading" in result.output
    fake_build.return_value.analyze.assert_awaited_once_with(
        "example.com/blue-widgets", "blue widgets"
    )


def test_analyze_json_output(fake_build, sample_report):
    fake_build.return_value.analyze.return_value = sample_report

    result = runner.invoke(app, ["analyze", "example.com/blue-widgets", "blue widgets", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["passedChecks"] == 1
    assert data["failedChecks"] == 1
    assert data["checks"][1]["priority"] == "high"


def test_analyze_error_exits_nonzero(fake_build):
    fake_build.return_value.analyze.return_value = PipelineError.security(
        "Domain not in allowlist: other.com"
    )

    result = runner.invoke(app, ["analyze", "other.com", "widgets"])

    assert result.exit_code == 1
    assert "[security] Domain not in allowlist: other.com" in result.output


def test_allow_option_extends_allowlist(fake_build, sample_report):
    fake_build.return_value.analyze.return_value = sample_report

    result = runner.invoke(
        app,
        ["analyze", "shop.example.com", "widgets", "--allow", "example.com", "--allow", "Example.org"],
    )

    assert result.exit_code == 0, result.output
    allowlist = fake_build.call_args.args[2]
    assert isinstance(allowlist, DomainAllowlist)
    assert allowlist.is_allowed("shop.example.com")
    assert "*.example.org" in allowlist


def test_config_command(monkeypatch):
    monkeypatch.setattr("cli.main.settings.enforce_domain_allowlist", True)
    monkeypatch.setattr("cli.main.settings.allowed_domains", ["example.com"])

    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0, result.output
    assert "[config] Allowlist enforcement: on" in result.output
    assert "example.com" in result.output


def test_cli_import_does_not_build_api_app():
    root = Path(__file__).resolve().parent.parent
    proc = subprocess.run(
        [sys.executable, "-c", "import sys, cli.main; print('seo_audit.api' in sys.modules)"],
        cwd=root,
        capture_output=True,
        text=True,
        check=True,
    )
    assert proc.stdout.strip() == "False"
