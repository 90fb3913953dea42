"""Error taxonomy shared by every pipeline stage.

Stages never let exceptions escape to the orchestrator.  Instead they return a
:class:`PipelineError` value carrying an :class:`ErrorCategory`, which the HTTP
layer maps straight onto a status code::

    VALIDATION -> 400    missing / malformed url or keyphrase
    SECURITY   -> 400    gate rejection (scheme, allowlist, IP, traversal)
    NETWORK    -> 500    DNS or page-fetch failure
    ANALYSIS   -> 500    unexpected extraction / evaluation failure
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    SECURITY = "security"
    NETWORK = "network"
    ANALYSIS = "analysis"

    @property
    def status_code(self) -> int:
        if self in (ErrorCategory.VALIDATION, ErrorCategory.SECURITY):
            return 400
        return 500


@dataclass(frozen=True)
class PipelineError:
    """A categorised stage failure.  Returned, never raised."""

    category: ErrorCategory
    message: str

    @property
    def status_code(self) -> int:
        return self.category.status_code

    @classmethod
    def validation(cls, message: str) -> PipelineError:
        return cls(ErrorCategory.VALIDATION, message)

    @classmethod
    def security(cls, message: str) -> PipelineError:
        return cls(ErrorCategory.SECURITY, message)

    @classmethod
    def network(cls, message: str) -> PipelineError:
        return cls(ErrorCategory.NETWORK, message)

    @classmethod
    def analysis(cls, message: str) -> PipelineError:
        return cls(ErrorCategory.ANALYSIS, message)


class ScrapeError(Exception):
    """Raised by the fetcher for non-2xx responses and transport failures.

    Only lives inside :mod:`seo_audit.scraper`; the extractor converts it into
    a NETWORK :class:`PipelineError` at its boundary.
    """

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        super().__init__(f"Failed to scrape {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code
