"""Data models for the scraper pipeline.

Everything past :class:`RawPage` is frozen: a :class:`ScrapedContent` is built
once per analysis and only read afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch.

    ``location`` is set (and ``html`` empty) when the server answered with a
    redirect; the caller decides whether to follow it.
    """

    url: str
    html: str
    status_code: int
    location: str | None = None


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class ImageInfo:
    src: str
    alt: str
    size: int | None = None  # bytes, from the HEAD response's Content-Length


@dataclass(frozen=True)
class Resource:
    """A JS or CSS resource.  ``minified`` is ``None`` for external files."""

    url: str
    content: str | None = None
    minified: bool | None = None


@dataclass(frozen=True)
class PageResources:
    js: tuple[Resource, ...] = ()
    css: tuple[Resource, ...] = ()


@dataclass(frozen=True)
class OpenGraphData:
    title: str = ""
    description: str = ""
    image: str = ""
    image_width: str = ""
    image_height: str = ""


@dataclass(frozen=True)
class SchemaSummary:
    detected: bool = False
    types: tuple[str, ...] = ()
    json_ld_blocks: tuple[Any, ...] = ()
    microdata_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScrapedContent:
    """Structured, read-only view of a single fetched page."""

    url: str
    title: str = ""
    meta_description: str = ""
    content: str = ""
    paragraphs: tuple[str, ...] = ()
    headings: tuple[Heading, ...] = ()
    images: tuple[ImageInfo, ...] = ()
    internal_links: tuple[str, ...] = ()
    outbound_links: tuple[str, ...] = ()
    open_graph: OpenGraphData = field(default_factory=OpenGraphData)
    resources: PageResources = field(default_factory=PageResources)
    schema: SchemaSummary = field(default_factory=SchemaSummary)

    def headings_at(self, level: int) -> tuple[Heading, ...]:
        """Return every heading of the given *level*, in document order."""
        return tuple(h for h in self.headings if h.level == level)
