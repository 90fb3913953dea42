"""FastAPI application factory.

Lifespan
--------
On startup the app opens one shared ``httpx.AsyncClient``, builds the
process-wide domain allowlist from ``ALLOWED_DOMAINS`` and wires the analysis
pipeline.  They are available to every request via ``request.app.state``:

    app.state.allowlist     — the :class:`DomainAllowlist`
    app.state.orchestrator  — the :class:`AnalysisOrchestrator`

On shutdown the HTTP client is closed.

Routers
-------
All endpoints are mounted under ``/api``:

    POST /api/analyze           — run an SEO audit
    POST /api/register-domains  — extend the allowlist
    GET  /api/allowed-domains   — list the allowlist
    GET  /api/ping              — liveness probe
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from seo_audit.api.routers import analyze as analyze_router
from seo_audit.api.routers import domains as domains_router
from seo_audit.config import configure_logging, settings
from seo_audit.orchestrator import build_orchestrator, log_recommendation_status
from seo_audit.scraper.fetcher import build_client
from seo_audit.security.allowlist import DomainAllowlist


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared services on startup and close the HTTP client on shutdown."""
    configure_logging()
    log_recommendation_status(settings)

    client = build_client(settings)
    allowlist = DomainAllowlist(settings.allowed_domains)
    app.state.allowlist = allowlist
    app.state.orchestrator = build_orchestrator(settings, client, allowlist)
    try:
        yield
    finally:
        await client.aclose()


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ())[1:]) or 'body'}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"message": f"Invalid request: {problems}"})


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="SEO Audit API",
        description=(
            "On-page SEO auditing of a single URL against a target keyphrase. "
            "Every outbound fetch passes an SSRF gate (HTTPS only, domain "
            "allowlist, private-address rejection) before the page is scored."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # The auditor is called from a browser extension on arbitrary origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(analyze_router.router, prefix="/api", tags=["analysis"])
    app.include_router(domains_router.router, prefix="/api", tags=["domains"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn seo_audit.api.app:app --reload
app = create_app()
