"""Async HTTP fetcher for page HTML and image sizes."""

from __future__ import annotations

import logging

import httpx

from seo_audit.config import Settings, settings
from seo_audit.errors import ScrapeError
from seo_audit.scraper.models import RawPage

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; SEOAuditBot/1.0; +https://github.com/seo-audit)"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def build_client(config: Settings | None = None) -> httpx.AsyncClient:
    """Return the shared async client used for page and image requests.

    The client never follows redirects itself; every hop has to pass the
    security gate first (see :class:`~seo_audit.scraper.ContentExtractor`).
    """
    return httpx.AsyncClient(
        headers=DEFAULT_HEADERS,
        timeout=(config or settings).request_timeout,
        follow_redirects=False,
    )


async def fetch_page(client: httpx.AsyncClient, url: str) -> RawPage:
    """GET *url* once and return a :class:`RawPage`.

    A 3xx response carrying a ``Location`` header is returned as-is with
    ``location`` set.

    Raises:
        ScrapeError: On any transport failure or other non-2xx status code.
    """
    try:
        response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as exc:
        raise ScrapeError(url, f"{type(exc).__name__}: {exc}") from exc

    if response.is_redirect:
        return RawPage(
            url=url,
            html="",
            status_code=response.status_code,
            location=response.headers["location"],
        )

    if not response.is_success:
        raise ScrapeError(
            url,
            f"HTTP {response.status_code} {response.reason_phrase}".strip(),
            status_code=response.status_code,
        )

    return RawPage(url=url, html=response.text, status_code=response.status_code)


async def fetch_content_length(
    client: httpx.AsyncClient, url: str, timeout: float | None = None
) -> int | None:
    """HEAD *url* and return its ``Content-Length`` in bytes.

    Returns ``None`` (never raises) when the request fails, the URL is
    malformed, the status is not 2xx, or the header is missing or malformed.
    *timeout* defaults to ``IMAGE_REQUEST_TIMEOUT``.
    """
    if timeout is None:
        timeout = settings.image_request_timeout
    try:
        response = await client.head(url, timeout=timeout)
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError, ValueError) as exc:
        logger.debug("Error getting size for image %s: %s", url, exc)
        return None

    if not response.is_success:
        return None

    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
