"""Allowlist management and liveness endpoints.

Routes
------
POST /api/register-domains    Body: {"domains": ["example.com", ...]}
GET  /api/allowed-domains
GET  /api/ping
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from seo_audit.security.allowlist import DomainAllowlist, is_valid_domain, normalise_domain

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class RegisterDomainsResponse(BaseModel):
    success: bool
    registered: list[str]
    failed: list[str]


class AllowedDomainsResponse(BaseModel):
    domains: list[str]


class PingResponse(BaseModel):
    status: str
    message: str
    timestamp: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/register-domains", response_model=RegisterDomainsResponse)
def register_domains_endpoint(request: Request, payload: Any = Body(default=None)):
    """Add each valid domain (and its ``*.`` wildcard form) to the allowlist.

    Already-registered domains are reported as registered; syntactically
    invalid ones are reported in ``failed``.
    """
    domains = payload.get("domains") if isinstance(payload, dict) else None
    if not isinstance(domains, list):
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Domains must be provided as an array"},
        )

    allowlist: DomainAllowlist = request.app.state.allowlist
    registered: list[str] = []
    failed: list[str] = []

    for raw in domains:
        if not isinstance(raw, str) or not is_valid_domain(raw):
            failed.append(str(raw))
            continue
        allowlist.add(raw)
        registered.append(normalise_domain(raw))

    if failed:
        logger.warning("Rejected %d invalid domain(s): %s", len(failed), ", ".join(failed))

    return RegisterDomainsResponse(
        success=not failed, registered=registered, failed=failed
    )


@router.get("/allowed-domains", response_model=AllowedDomainsResponse)
def allowed_domains_endpoint(request: Request) -> AllowedDomainsResponse:
    allowlist: DomainAllowlist = request.app.state.allowlist
    return AllowedDomainsResponse(domains=allowlist.entries())


@router.get("/ping", response_model=PingResponse)
def ping_endpoint() -> PingResponse:
    return PingResponse(
        status="ok",
        message="SEO audit API is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
