"""Analysis endpoint.

Routes
------
POST /api/analyze    Body: {"url": "...", "keyphrase": "..."}    → AnalysisReport

Pipeline errors map to ``{"message": ...}`` with 400 for validation and
security rejections and 500 for network and analysis failures.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from seo_audit.analysis.schemas import AnalysisReportOut, report_response
from seo_audit.errors import PipelineError

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    # Blank values are rejected by the orchestrator with a 400.
    url: str = ""
    keyphrase: str = ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def error_response(error: PipelineError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"message": error.message})


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/analyze", response_model=AnalysisReportOut)
async def analyze_endpoint(body: AnalyzeRequest, request: Request):
    """Audit ``body.url`` against ``body.keyphrase`` and return the scored checklist."""
    orchestrator = request.app.state.orchestrator
    result = await orchestrator.analyze(body.url, body.keyphrase)
    if isinstance(result, PipelineError):
        return error_response(result)
    return report_response(result)
