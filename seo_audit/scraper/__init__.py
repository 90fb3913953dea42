"""Scraper package — page fetch & content extraction."""

from seo_audit.scraper.extractor import ContentExtractor, extract_content, is_minified
from seo_audit.scraper.fetcher import MAX_REDIRECTS, build_client, fetch_content_length, fetch_page
from seo_audit.scraper.models import (
    Heading,
    ImageInfo,
    OpenGraphData,
    PageResources,
    RawPage,
    Resource,
    SchemaSummary,
    ScrapedContent,
)

__all__ = [
    "MAX_REDIRECTS",
    "ContentExtractor",
    "Heading",
    "ImageInfo",
    "OpenGraphData",
    "PageResources",
    "RawPage",
    "Resource",
    "SchemaSummary",
    "ScrapedContent",
    "build_client",
    "extract_content",
    "fetch_content_length",
    "fetch_page",
    "is_minified",
]
