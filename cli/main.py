"""SEO audit CLI — runs the same pipeline as ``POST /api/analyze``.

Usage:
    python cli/main.py --help
    seo-audit analyze example.com/blog/post "blue widgets" --allow example.com

Exit code is 1 when the pipeline returns an error (validation, security,
network or analysis) and 0 otherwise, whatever the score.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from seo_audit.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
from typing import List, Optional

import typer

from cli.rendering import render_error, render_json, render_report
from seo_audit.analysis.models import AnalysisReport
from seo_audit.config import configure_logging, settings
from seo_audit.errors import PipelineError
from seo_audit.orchestrator import build_orchestrator
from seo_audit.scraper.fetcher import build_client
from seo_audit.security.allowlist import DomainAllowlist

app = typer.Typer(
    name="seo-audit",
    help="On-page SEO auditor.",
    no_args_is_help=True,
)


async def _run_analysis(
    url: str, keyphrase: str, allow: List[str]
) -> AnalysisReport | PipelineError:
    allowlist = DomainAllowlist(settings.allowed_domains)
    for domain in allow:
        allowlist.add(domain)

    async with build_client(settings) as client:
        orchestrator = build_orchestrator(settings, client, allowlist)
        return await orchestrator.analyze(url, keyphrase)


@app.command("analyze")
def analyze(
    url: str = typer.Argument(..., help="Page to audit (https:// is assumed)."),
    keyphrase: str = typer.Argument(..., help="Target keyphrase."),
    allow: Optional[List[str]] = typer.Option(
        None, "--allow", help="Add a domain (and its subdomains) to the allowlist. Repeatable."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Audit URL against KEYPHRASE and print the scored checklist."""
    configure_logging()
    result = asyncio.run(_run_analysis(url, keyphrase, allow or []))

    if isinstance(result, PipelineError):
        typer.echo(render_error(result), err=True)
        raise typer.Exit(1)

    typer.echo(render_json(result) if as_json else render_report(result))


@app.command("config")
def show_config() -> None:
    """Print the effective configuration without contacting any site."""
    enforcement = "on" if settings.enforce_domain_allowlist else "off"
    typer.echo(f"[config] Allowlist enforcement: {enforcement}")
    typer.echo(f"[config] Allowed domains      : {', '.join(settings.allowed_domains) or '(none)'}")
    typer.echo(f"[config] GPT recommendations  : {'on' if settings.gpt_enabled else 'off'}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
