"""Content extraction: turns a :class:`RawPage` into a :class:`ScrapedContent`.

``extract_content`` is a pure function over the HTML.  ``ContentExtractor``
wraps it with the single page fetch and the concurrent image-size lookups, and
converts every failure into a :class:`~seo_audit.errors.PipelineError`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import replace
from typing import Any, Iterable
from urllib.parse import urljoin, urlsplit

import httpx
from bs4 import BeautifulSoup, Tag

from seo_audit.errors import PipelineError, ScrapeError
from seo_audit.scraper.fetcher import MAX_REDIRECTS, fetch_content_length, fetch_page
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
from seo_audit.security.gate import UrlSecurityGate

logger = logging.getLogger(__name__)

PARAGRAPH_SELECTOR = "article p, main p, .content p, #content p, .post-content p, p"
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
INLINE_SCRIPT = "inline-script"
INLINE_STYLE = "inline-style"

_JSON_LD_TYPE = re.compile(r"^\s*application/ld\+json\s*$", re.IGNORECASE)
_SCHEMA_ORG_TYPE = re.compile(r"schema\.org/([a-zA-Z]+)")
_WHITESPACE = re.compile(r"\s")


# ---------------------------------------------------------------------------
# Minification heuristic
# ---------------------------------------------------------------------------

def is_minified(code: str) -> bool:
    """Heuristically decide whether *code* (JS or CSS) is minified.

    Snippets shorter than 50 characters are too short to judge and count as
    minified.  Otherwise code with very few newlines and little whitespace,
    or with an average non-blank line longer than 500 characters, is minified.
    """
    if len(code) < 50:
        return True

    length = len(code)
    newline_ratio = code.count("\n") / length
    whitespace_ratio = len(_WHITESPACE.findall(code)) / length

    lines = [line for line in code.split("\n") if line.strip()]
    avg_line_length = length / len(lines) if lines else 0.0

    return (newline_ratio < 0.01 and whitespace_ratio < 0.15) or avg_line_length > 500


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _clean_text(node: Tag) -> str:
    """Return the text of *node* with runs of whitespace collapsed."""
    return " ".join(node.get_text(" ").split())


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def _meta_content(soup: BeautifulSoup, **attrs: Any) -> str:
    tag = soup.find("meta", attrs=attrs)
    if isinstance(tag, Tag):
        value = tag.get("content")
        if isinstance(value, str):
            return value.strip()
    return ""


def _extract_open_graph(soup: BeautifulSoup) -> OpenGraphData:
    return OpenGraphData(
        title=_meta_content(soup, property="og:title"),
        description=_meta_content(soup, property="og:description"),
        image=_meta_content(soup, property="og:image"),
        image_width=_meta_content(soup, property="og:image:width"),
        image_height=_meta_content(soup, property="og:image:height"),
    )


def _extract_paragraphs(soup: BeautifulSoup) -> list[str]:
    paragraphs: list[str] = []
    for el in soup.select(PARAGRAPH_SELECTOR):
        text = _clean_text(el)
        if text:
            paragraphs.append(text)
    return paragraphs


def _extract_headings(soup: BeautifulSoup) -> list[Heading]:
    headings: list[Heading] = []
    for el in soup.find_all(HEADING_TAGS):
        text = _clean_text(el)
        if text:
            headings.append(Heading(level=int(el.name[1]), text=text))
    return headings


def _extract_images(soup: BeautifulSoup) -> list[ImageInfo]:
    return [
        ImageInfo(src=(img.get("src") or "").strip(), alt=img.get("alt") or "")
        for img in soup.find_all("img")
    ]


def _classify_links(soup: BeautifulSoup, page_url: str) -> tuple[list[str], list[str]]:
    """Split every ``<a href>`` into internal and outbound absolute URLs."""
    origin = _origin(page_url)
    page_host = (urlsplit(page_url).hostname or "").lower()
    internal: list[str] = []
    outbound: list[str] = []

    for a in soup.find_all("a", href=True):
        href = (a.get("href") or "").strip()
        if not href:
            continue
        try:
            resolved = urljoin(origin, href)
            host = (urlsplit(resolved).hostname or "").lower()
        except ValueError:
            continue
        if host == page_host:
            internal.append(resolved)
        else:
            outbound.append(resolved)

    return internal, outbound


def _extract_resources(soup: BeautifulSoup, page_url: str) -> PageResources:
    origin = _origin(page_url)
    js: list[Resource] = []
    css: list[Resource] = []

    for script in soup.find_all("script", src=True):
        src = (script.get("src") or "").strip()
        if src:
            try:
                js.append(Resource(url=urljoin(origin, src)))
            except ValueError:
                continue

    for link in soup.select("link[rel~=stylesheet][href]"):
        href = (link.get("href") or "").strip()
        if href:
            try:
                css.append(Resource(url=urljoin(origin, href)))
            except ValueError:
                continue

    for style in soup.find_all("style"):
        code = style.get_text().strip()
        if code:
            css.append(Resource(url=INLINE_STYLE, content=code, minified=is_minified(code)))

    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        code = script.get_text().strip()
        if code:
            js.append(Resource(url=INLINE_SCRIPT, content=code, minified=is_minified(code)))

    return PageResources(js=tuple(js), css=tuple(css))


def _json_ld_types(block: Any) -> Iterable[str]:
    """Yield every ``@type`` found in a JSON-LD block, including ``@graph`` items."""
    if isinstance(block, list):
        for item in block:
            yield from _json_ld_types(item)
        return
    if not isinstance(block, dict):
        return

    declared = block.get("@type")
    if isinstance(declared, str) and declared:
        yield declared
    elif isinstance(declared, list):
        yield from (str(t) for t in declared if t)

    graph = block.get("@graph")
    if isinstance(graph, list):
        yield from _json_ld_types(graph)


def _extract_schema(soup: BeautifulSoup) -> SchemaSummary:
    blocks: list[Any] = []
    for script in soup.find_all("script", attrs={"type": _JSON_LD_TYPE}):
        raw = script.get_text()
        if not raw.strip():
            continue
        try:
            blocks.append(json.loads(raw))
        except json.JSONDecodeError as exc:
            logger.info("Skipping unparsable JSON-LD block: %s", exc)

    microdata: list[str] = []
    for el in soup.find_all(attrs={"itemscope": True}):
        itemtype = el.get("itemtype")
        if not itemtype:
            continue
        itemtype = " ".join(itemtype) if isinstance(itemtype, list) else str(itemtype)
        match = _SCHEMA_ORG_TYPE.search(itemtype)
        microdata.append(match.group(1) if match else itemtype)

    types: list[str] = []
    for block in blocks:
        for schema_type in _json_ld_types(block):
            if schema_type not in types:
                types.append(schema_type)
    for schema_type in microdata:
        if schema_type not in types:
            types.append(schema_type)

    return SchemaSummary(
        detected=bool(blocks) or bool(microdata),
        types=tuple(types),
        json_ld_blocks=tuple(blocks),
        microdata_types=tuple(microdata),
    )


def _visible_text(soup: BeautifulSoup) -> str:
    """Body text with script, style and template contents removed.

    Mutates *soup*, so it must run after every other extraction step.
    """
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    root = soup.body or soup
    return " ".join(root.get_text(" ").split())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_content(raw: RawPage) -> ScrapedContent:
    """Parse *raw* into a :class:`ScrapedContent`.

    Image sizes are left unset; :class:`ContentExtractor` fills them in.
    """
    soup = BeautifulSoup(raw.html, "html.parser")

    title_tag = soup.find("title")
    title = _clean_text(title_tag) if isinstance(title_tag, Tag) else ""
    internal, outbound = _classify_links(soup, raw.url)
    resources = _extract_resources(soup, raw.url)
    schema = _extract_schema(soup)

    return ScrapedContent(
        url=raw.url,
        title=title,
        meta_description=_meta_content(soup, name="description"),
        paragraphs=tuple(_extract_paragraphs(soup)),
        headings=tuple(_extract_headings(soup)),
        images=tuple(_extract_images(soup)),
        internal_links=tuple(internal),
        outbound_links=tuple(outbound),
        open_graph=_extract_open_graph(soup),
        resources=resources,
        schema=schema,
        content=_visible_text(soup),
    )


class ContentExtractor:
    """Fetches a page and builds its :class:`ScrapedContent`.

    Every outbound request goes through *gate*: each redirect hop is
    validated and resolved before it is requested, and an image is only
    sized when its ``https`` URL resolves to public addresses.

    Usage::

        extractor = ContentExtractor(client, gate)
        result = await extractor.extract("https://example.com/")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        gate: UrlSecurityGate,
        image_timeout: float | None = None,
        max_redirects: int = MAX_REDIRECTS,
    ) -> None:
        self._client = client
        self._gate = gate
        self._image_timeout = image_timeout
        self._max_redirects = max_redirects

    @property
    def gate(self) -> UrlSecurityGate:
        return self._gate

    @property
    def image_timeout(self) -> float | None:
        return self._image_timeout

    async def _image_size(self, image: ImageInfo, origin: str) -> ImageInfo:
        if not image.src:
            return image
        try:
            image_url = urljoin(origin, image.src)
        except ValueError:
            return image
        if urlsplit(image_url).scheme != "https":
            return image

        checked = await self._gate.resolve_and_check_ip(image_url)
        if isinstance(checked, PipelineError):
            logger.debug("Skipping size check for image %s: %s", image_url, checked.message)
            return image

        size = await fetch_content_length(self._client, image_url, timeout=self._image_timeout)
        return replace(image, size=size)

    async def measure_images(self, content: ScrapedContent) -> tuple[ImageInfo, ...]:
        """HEAD every image concurrently and return the sized image list."""
        origin = _origin(content.url)
        sized = await asyncio.gather(
            *(self._image_size(image, origin) for image in content.images)
        )
        return tuple(sized)

    async def _check_hop(self, location: str) -> str | PipelineError:
        checked = self._gate.validate(location)
        if isinstance(checked, PipelineError):
            return checked
        resolved = await self._gate.resolve_and_check_ip(checked.normalized_url)
        if isinstance(resolved, PipelineError):
            return resolved
        return resolved.normalized_url

    async def fetch(self, url: str) -> RawPage | PipelineError:
        """GET *url*, following at most ``max_redirects`` gated redirects."""
        target = url
        for _hop in range(self._max_redirects + 1):
            try:
                raw = await fetch_page(self._client, target)
            except ScrapeError as exc:
                logger.error("Failed to scrape webpage: %s", exc)
                return PipelineError.network(str(exc))

            if raw.location is None:
                return raw

            checked = await self._check_hop(urljoin(target, raw.location))
            if isinstance(checked, PipelineError):
                return checked
            logger.info("Following %d redirect %s -> %s", raw.status_code, target, checked)
            target = checked

        logger.error("Too many redirects fetching %s", url)
        return PipelineError.network(f"Too many redirects fetching {url}")

    async def extract(self, url: str) -> ScrapedContent | PipelineError:
        raw = await self.fetch(url)
        if isinstance(raw, PipelineError):
            return raw

        try:
            content = extract_content(raw)
        except Exception as exc:
            logger.exception("Failed to parse %s", url)
            return PipelineError.analysis(f"Failed to parse webpage: {exc}")

        images = await self.measure_images(content)
        logger.info(
            "Extracted %s: %d paragraph(s), %d heading(s), %d image(s)",
            raw.url,
            len(content.paragraphs),
            len(content.headings),
            len(images),
        )
        return replace(content, images=images)
