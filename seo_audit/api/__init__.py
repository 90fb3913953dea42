"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from seo_audit.api import app

    uvicorn seo_audit.api:app --reload
"""

from seo_audit.api.app import app

__all__ = ["app"]
