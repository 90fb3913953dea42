"""The individual on-page SEO rules.

Every rule is a pure function ``(RuleContext) -> CheckOutcome`` over data that
has already been extracted; none of them perform I/O.  ``RULES`` lists them
in evaluation order, which is also the order of checks in the final report.

Keyphrase matching is case-insensitive throughout.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Callable

from seo_audit.analysis import titles as t
from seo_audit.analysis.models import CheckOutcome
from seo_audit.scraper.extractor import INLINE_SCRIPT, INLINE_STYLE
from seo_audit.scraper.models import Heading, ImageInfo, ScrapedContent

MIN_WORD_COUNT = 300
MIN_DENSITY = 0.5
MAX_DENSITY = 2.5
NEXT_GEN_FORMATS = (".webp", ".avif", ".svg")
OG_MIN_WIDTH = 1200
OG_MIN_HEIGHT = 630
OG_TITLE_LENGTH = (10, 70)
OG_DESCRIPTION_LENGTH = (100, 200)
MIN_MINIFIED_PERCENT = 40
MAX_IMAGE_SIZE = 300 * 1024

SUCCESS_MESSAGES: dict[str, str] = {
    t.KEYPHRASE_IN_TITLE: "Great job! Your title includes the target keyphrase.",
    t.KEYPHRASE_IN_META_DESCRIPTION: "Perfect! Your meta description effectively uses the keyphrase.",
    t.KEYPHRASE_IN_URL: "Excellent! Your URL is SEO-friendly with the keyphrase.",
    t.CONTENT_LENGTH: "Well done! Your content length is good for SEO.",
    t.KEYPHRASE_DENSITY: "Perfect! Your keyphrase density is within the optimal range.",
    t.KEYPHRASE_IN_INTRODUCTION: "Excellent! You've included the keyphrase in your introduction.",
    t.IMAGE_ALT_ATTRIBUTES: "Well done! Your images are properly optimized with the keyphrase.",
    t.INTERNAL_LINKS: "Perfect! You have a good number of internal links.",
    t.OUTBOUND_LINKS: "Excellent! You've included relevant outbound links.",
    t.NEXT_GEN_IMAGE_FORMATS: "Excellent! Your images use modern, optimized formats.",
    t.OG_IMAGE: "Great job! Your page has a properly configured Open Graph image.",
    t.OG_TITLE_AND_DESCRIPTION: "Perfect! Open Graph title and description are well configured.",
    t.KEYPHRASE_IN_H1: "Excellent! Your main H1 heading effectively includes the keyphrase.",
    t.KEYPHRASE_IN_H2: "Great job! Your H2 subheadings include the keyphrase, reinforcing your topic focus.",
    t.HEADING_HIERARCHY: "Great job! Your page has a proper heading tag hierarchy.",
    t.CODE_MINIFICATION: "Excellent! Your JavaScript and CSS files are properly minified for better performance.",
    t.SCHEMA_MARKUP: "Great job! Your page has schema markup implemented, making it easier for search engines to understand your content.",
    t.IMAGE_FILE_SIZE: "Great job! All your images are well-optimized, keeping your page loading times fast.",
}

HOMEPAGE_URL_MESSAGE = "All good here, since it's the homepage! ✨"

_LEADING_INT = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class RuleContext:
    content: ScrapedContent
    keyphrase: str
    url: str
    is_home_page: bool

    @property
    def keyphrase_lower(self) -> str:
        return self.keyphrase.lower()


@dataclass(frozen=True)
class DensityResult:
    density: float
    occurrences: int
    total_words: int


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def contains_keyphrase(text: str, keyphrase: str) -> bool:
    return bool(keyphrase) and keyphrase.lower() in (text or "").lower()


def significant_words(keyphrase: str) -> list[str]:
    """Keyphrase words longer than two characters, lower-cased."""
    return [word for word in keyphrase.lower().split() if len(word) > 2]


def word_count(text: str) -> int:
    return len(text.split())


def calculate_keyphrase_density(content: str, keyphrase: str) -> DensityResult:
    """Whole-word, case-insensitive keyphrase density as a percentage.

    ``density = occurrences * keyphrase_words / total_words * 100`` where the
    word total is a plain whitespace split of the content.
    """
    normalized_content = content.lower().strip()
    normalized_keyphrase = keyphrase.lower().strip()
    total_words = len(normalized_content.split())

    if not normalized_keyphrase or total_words == 0:
        return DensityResult(density=0.0, occurrences=0, total_words=total_words)

    pattern = re.compile(rf"\b{re.escape(normalized_keyphrase)}\b")
    occurrences = len(pattern.findall(normalized_content))
    density = occurrences * len(normalized_keyphrase.split()) / total_words * 100
    return DensityResult(density=density, occurrences=occurrences, total_words=total_words)


def format_bytes(size: int | None) -> str:
    if not size:
        return "Unknown size"
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def image_label(image: ImageInfo) -> str:
    """Alt text (truncated to 40 characters) or a placeholder label."""
    if not image.alt:
        return "Image with missing alt text"
    return image.alt[:40] + "..." if len(image.alt) > 40 else image.alt


def success_message(title: str, is_home_page: bool, default: str = "") -> str:
    if title == t.KEYPHRASE_IN_URL and is_home_page:
        return HOMEPAGE_URL_MESSAGE
    return SUCCESS_MESSAGES.get(title, default)


def _parse_dimension(value: str) -> int | None:
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else None


def _quoted(headings: tuple[Heading, ...]) -> str:
    return ", ".join(f'"{h.text}"' for h in headings)


def suggest_schema_types(content: ScrapedContent, is_home_page: bool) -> list[str]:
    """Infer which schema.org types suit the page from simple content signals."""
    text = content.content.lower()
    title = content.title.lower()

    has_product = "product" in title or any(
        marker in text for marker in ("price", "buy now", "add to cart")
    )
    has_article = (
        len(content.paragraphs) > 3
        or word_count(content.content) > 500
        or any(marker in title for marker in ("article", "blog", "news"))
    )
    has_faq = (
        "faq" in text
        or "frequently asked" in text
        or any("faq" in h.text.lower() or "question" in h.text.lower() for h in content.headings)
    )
    has_organization = any(
        marker in text for marker in ("about us", "contact us", "our team", "company")
    )

    suggestions: list[str] = []
    if is_home_page:
        suggestions.append("Organization or WebSite Schema")
    if has_product:
        suggestions.append("Product Schema")
    if has_article:
        suggestions.append("Article Schema")
    if has_faq:
        suggestions.append("FAQ Schema")
    if has_organization and not is_home_page:
        suggestions.append("Organization Schema")
    if not is_home_page and not suggestions:
        suggestions.append("WebPage Schema")
    return suggestions


# ---------------------------------------------------------------------------
# Keyphrase placement
# ---------------------------------------------------------------------------

def check_title(ctx: RuleContext) -> CheckOutcome:
    return CheckOutcome(
        title=t.KEYPHRASE_IN_TITLE,
        passed=contains_keyphrase(ctx.content.title, ctx.keyphrase),
        description="The focus keyphrase should appear in the page title",
        context=ctx.content.title,
    )


def check_meta_description(ctx: RuleContext) -> CheckOutcome:
    return CheckOutcome(
        title=t.KEYPHRASE_IN_META_DESCRIPTION,
        passed=contains_keyphrase(ctx.content.meta_description, ctx.keyphrase),
        description="The meta description should contain the focus keyphrase",
        context=ctx.content.meta_description,
    )


def check_url(ctx: RuleContext) -> CheckOutcome:
    if ctx.is_home_page:
        return CheckOutcome(
            title=t.KEYPHRASE_IN_URL,
            passed=True,
            description=HOMEPAGE_URL_MESSAGE,
            context=ctx.url,
        )
    return CheckOutcome(
        title=t.KEYPHRASE_IN_URL,
        passed=contains_keyphrase(ctx.url, ctx.keyphrase),
        description="The URL should contain the focus keyphrase",
        context=ctx.url,
    )


def check_introduction(ctx: RuleContext) -> CheckOutcome:
    first_paragraph = ctx.content.paragraphs[0] if ctx.content.paragraphs else ""
    passed = False
    context = "No introduction paragraph found"

    if first_paragraph:
        normalized_paragraph = " ".join(first_paragraph.lower().split())
        normalized_keyphrase = " ".join(ctx.keyphrase_lower.split())
        passed = bool(normalized_keyphrase) and normalized_keyphrase in normalized_paragraph
        context = first_paragraph

    return CheckOutcome(
        title=t.KEYPHRASE_IN_INTRODUCTION,
        passed=passed,
        description=(
            "The focus keyphrase appears naturally in the first paragraph"
            if passed
            else "The focus keyphrase should appear in the first paragraph to establish topic relevance early"
        ),
        context=context,
    )


def check_image_alt(ctx: RuleContext) -> CheckOutcome:
    images = ctx.content.images
    return CheckOutcome(
        title=t.IMAGE_ALT_ATTRIBUTES,
        passed=any(contains_keyphrase(img.alt, ctx.keyphrase) for img in images),
        description="At least one image should have an alt attribute containing the focus keyphrase",
        context=json.dumps([{"src": img.src, "alt": img.alt} for img in images]),
    )


def check_h1(ctx: RuleContext) -> CheckOutcome:
    h1s = ctx.content.headings_at(1)
    has_keyphrase = any(contains_keyphrase(h.text, ctx.keyphrase) for h in h1s)

    if not has_keyphrase and h1s:
        words = significant_words(ctx.keyphrase)
        if words:
            has_keyphrase = all(
                any(word in h.text.lower() for h in h1s) for word in words
            )

    if not h1s:
        description = "Your page is missing an H1 heading. Add an H1 heading that includes your keyphrase."
        context = "No H1 headings found on page"
    else:
        if len(h1s) > 1:
            description = (
                "You have multiple H1 headings. Best practice is to have a single H1 "
                "heading that includes your keyphrase."
            )
        else:
            description = "Your H1 heading should include your target keyphrase for optimal SEO."
        state = "(contains keyphrase)" if has_keyphrase else "(missing keyphrase)"
        context = f"H1 heading {state}: {_quoted(h1s)}"

    return CheckOutcome(
        title=t.KEYPHRASE_IN_H1,
        passed=has_keyphrase and len(h1s) == 1,
        description=description,
        context=f'{context}\nTarget keyphrase: "{ctx.keyphrase}"',
    )


def check_h2(ctx: RuleContext) -> CheckOutcome:
    h2s = ctx.content.headings_at(2)
    has_keyphrase = any(contains_keyphrase(h.text, ctx.keyphrase) for h in h2s)

    if not has_keyphrase and h2s:
        words = significant_words(ctx.keyphrase)
        if words:
            in_one_h2 = any(all(word in h.text.lower() for word in words) for h in h2s)
            across_h2s = all(any(word in h.text.lower() for h in h2s) for word in words)
            has_keyphrase = in_one_h2 or across_h2s

    if not h2s:
        context = "No H2 headings found on page"
    else:
        state = "(contains keyphrase)" if has_keyphrase else "(missing keyphrase)"
        lines = [f"H2 headings {state}:"]
        lines.extend(f'{i}. "{h.text}"' for i, h in enumerate(h2s, start=1))
        if not has_keyphrase:
            lines.append("")
            lines.append("Consider updating at least one H2 to include your target keyphrase.")
        context = "\n".join(lines)

    return CheckOutcome(
        title=t.KEYPHRASE_IN_H2,
        passed=has_keyphrase and bool(h2s),
        description=(
            "Your page doesn't have any H2 headings. Add H2 subheadings that include "
            "your keyphrase to structure your content."
            if not h2s
            else "Your H2 headings should include your target keyphrase at least once "
            "to reinforce your topic focus."
        ),
        context=f'{context}\nTarget keyphrase: "{ctx.keyphrase}"',
    )


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------

def check_content_length(ctx: RuleContext) -> CheckOutcome:
    words = word_count(ctx.content.content)
    return CheckOutcome(
        title=t.CONTENT_LENGTH,
        passed=words >= MIN_WORD_COUNT,
        description=(
            f"Your content has {words} words. For good SEO, aim for at least "
            f"{MIN_WORD_COUNT} words to provide comprehensive coverage of your topic."
        ),
        context=f"Current word count: {words}",
        details={"word_count": words, "min_word_count": MIN_WORD_COUNT},
    )


def check_density(ctx: RuleContext) -> CheckOutcome:
    result = calculate_keyphrase_density(ctx.content.content, ctx.keyphrase)
    return CheckOutcome(
        title=t.KEYPHRASE_DENSITY,
        passed=MIN_DENSITY <= result.density <= MAX_DENSITY,
        description=(
            f"Keyphrase density should be between {MIN_DENSITY}% and {MAX_DENSITY}%. "
            f"Current density: {result.density:.1f}% ({result.occurrences} occurrences "
            f"in {result.total_words} words)"
        ),
        context=(
            f"Content length: {result.total_words} words, "
            f"Keyphrase occurrences: {result.occurrences}"
        ),
        details={
            "density": result.density,
            "occurrences": result.occurrences,
            "total_words": result.total_words,
        },
    )


def check_internal_links(ctx: RuleContext) -> CheckOutcome:
    count = len(ctx.content.internal_links)
    return CheckOutcome(
        title=t.INTERNAL_LINKS,
        passed=count > 0,
        description="The page should contain internal links to other pages",
        context=f"Found {count} internal links",
    )


def check_outbound_links(ctx: RuleContext) -> CheckOutcome:
    count = len(ctx.content.outbound_links)
    return CheckOutcome(
        title=t.OUTBOUND_LINKS,
        passed=count > 0,
        description="The page should contain outbound links to authoritative sources",
        context=f"Found {count} outbound links",
    )


# ---------------------------------------------------------------------------
# Images & social
# ---------------------------------------------------------------------------

def check_next_gen_formats(ctx: RuleContext) -> CheckOutcome:
    images = ctx.content.images
    non_optimized = [
        img.src for img in images if not img.src.lower().endswith(NEXT_GEN_FORMATS)
    ]
    # A page without images fails this check.
    passed = bool(images) and not non_optimized
    return CheckOutcome(
        title=t.NEXT_GEN_IMAGE_FORMATS,
        passed=passed,
        description="Images should use modern formats like WebP, AVIF, or SVG for better performance",
        context=", ".join(img.src for img in images),
        details={"image_count": len(images), "non_optimized": non_optimized},
    )


def check_og_image(ctx: RuleContext) -> CheckOutcome:
    og = ctx.content.open_graph
    has_image = bool(og.image)
    width = _parse_dimension(og.image_width)
    height = _parse_dimension(og.image_height)
    large_enough = (
        width is not None
        and height is not None
        and width >= OG_MIN_WIDTH
        and height >= OG_MIN_HEIGHT
    )

    if has_image:
        current = (
            f"Current image size: {og.image_width or 'unknown'}x"
            f"{og.image_height or 'unknown'}px."
        )
        if large_enough:
            description = (
                "Open Graph image is present with recommended dimensions "
                f"(1200x630 or larger). {current}"
            )
        else:
            description = (
                f"Open Graph image is present. {current} Recommended size is at least "
                "1200x630px for optimal social sharing."
            )
    else:
        current = "No OG image found."
        description = (
            f"Open Graph image is missing. {current} Add an OG image with dimensions "
            "of at least 1200x630px."
        )

    return CheckOutcome(
        title=t.OG_IMAGE,
        passed=has_image,
        description=description,
        context=f"Current Open Graph image: {og.image or 'none'}. {current}",
    )


def check_og_title_description(ctx: RuleContext) -> CheckOutcome:
    og = ctx.content.open_graph
    title_ok = OG_TITLE_LENGTH[0] <= len(og.title) <= OG_TITLE_LENGTH[1]
    description_ok = OG_DESCRIPTION_LENGTH[0] <= len(og.description) <= OG_DESCRIPTION_LENGTH[1]
    passed = bool(og.title) and bool(og.description) and title_ok and description_ok
    return CheckOutcome(
        title=t.OG_TITLE_AND_DESCRIPTION,
        passed=passed,
        description=(
            "Open Graph title and description are properly set with optimal lengths"
            if passed
            else "Open Graph title and/or description need optimization"
        ),
        context=json.dumps({"title": og.title, "description": og.description}),
    )


def check_image_file_size(ctx: RuleContext) -> CheckOutcome:
    images = ctx.content.images
    large = [img for img in images if img.size is not None and img.size > MAX_IMAGE_SIZE]
    with_size = sum(1 for img in images if img.size is not None)

    lines = [
        f"Found {len(images)} images, {with_size} with retrievable size information.",
        f"{len(large)} images exceed the recommended size of 300KB.",
    ]
    if large:
        lines.append("")
        lines.append("Large images:")
        lines.extend(f"- {image_label(img)} ({format_bytes(img.size)})" for img in large)

    return CheckOutcome(
        title=t.IMAGE_FILE_SIZE,
        passed=not large,
        description=(
            "All images are optimized with file sizes under 300KB."
            if not large
            else f"{len(large)} out of {len(images)} images exceed the recommended size "
            "of 300KB. Large images slow down page loading."
        ),
        context="\n".join(lines),
        details={
            "large_images": [
                {"src": img.src, "label": image_label(img), "size": img.size}
                for img in large
            ]
        },
    )


# ---------------------------------------------------------------------------
# Structure & technical
# ---------------------------------------------------------------------------

def check_heading_hierarchy(ctx: RuleContext) -> CheckOutcome:
    headings = ctx.content.headings
    h1_count = len(ctx.content.headings_at(1))
    has_h2 = bool(ctx.content.headings_at(2))

    skipped: str | None = None
    previous = 0
    for heading in headings:
        if previous > 0 and heading.level > previous + 1:
            skipped = f"H{previous} → H{heading.level}"
            break
        previous = heading.level

    passed = h1_count == 1 and has_h2 and skipped is None

    if h1_count == 0:
        issue = "Missing H1 heading"
        description = (
            "Your page is missing an H1 heading, which is crucial for SEO and "
            "document structure."
        )
    elif h1_count > 1:
        issue = f"Multiple H1 headings ({h1_count} found)"
        description = (
            "Your page has multiple H1 headings. Best practice is to have a single "
            "H1 heading per page."
        )
    elif not has_h2:
        issue = "Missing H2 headings"
        description = (
            "Your page is missing H2 headings. Use H2 headings to structure your "
            "content under the main H1 heading."
        )
    elif skipped:
        issue = f"Heading level skip detected ({skipped})"
        description = (
            "Your heading structure skips levels (e.g., H1 followed directly by H3). "
            "This can confuse search engines and assistive technologies."
        )
    else:
        issue = ""
        description = (
            "Your page has a proper heading structure with a single H1 followed by "
            "appropriate subheadings."
        )

    structure = "\n".join(
        f'H{h.level}: "{h.text[:30] + "..." if len(h.text) > 30 else h.text}"'
        for h in headings
    )
    context = f"Current heading structure:\n{structure}"
    if issue:
        context += f"\n\nIssue: {issue}"

    return CheckOutcome(
        title=t.HEADING_HIERARCHY,
        passed=passed,
        description=description,
        context=context,
        details={"issue": issue, "skipped": skipped, "h1_count": h1_count, "has_h2": has_h2},
    )


def check_code_minification(ctx: RuleContext) -> CheckOutcome:
    js = ctx.content.resources.js
    css = ctx.content.resources.css
    total = len(js) + len(css)
    minified_js = sum(1 for r in js if r.minified)
    minified_css = sum(1 for r in css if r.minified)
    percentage = round((minified_js + minified_css) / total * 100) if total else 100
    passed = percentage >= MIN_MINIFIED_PERCENT

    non_minified_js = [r.url for r in js if not r.minified and r.url != INLINE_SCRIPT]
    non_minified_css = [r.url for r in css if not r.minified and r.url != INLINE_STYLE]
    inline_non_minified = any(
        r.url == INLINE_SCRIPT and not r.minified for r in js
    ) or any(r.url == INLINE_STYLE and not r.minified for r in css)

    if total == 0:
        context = "No JavaScript or CSS resources found on the page."
    else:
        context = (
            f"Found {len(js)} JavaScript and {len(css)} CSS resources. "
            f"{minified_js} of {len(js)} JavaScript and {minified_css} of {len(css)} "
            "CSS resources are minified."
        )
        if non_minified_js:
            context += "\n\nNon-minified JavaScript files:\n" + "\n".join(non_minified_js)
        if non_minified_css:
            context += "\n\nNon-minified CSS files:\n" + "\n".join(non_minified_css)
        if inline_non_minified:
            context += "\n\nNon-minified inline scripts or styles detected."

    return CheckOutcome(
        title=t.CODE_MINIFICATION,
        passed=passed,
        description=(
            f"Your JavaScript and CSS resources are well optimized. {percentage}% are minified."
            if passed
            else f"{percentage}% of your JavaScript and CSS resources are minified. "
            f"Aim for at least {MIN_MINIFIED_PERCENT}% minification."
        ),
        context=context,
        details={
            "percentage": percentage,
            "non_minified_js": non_minified_js,
            "non_minified_css": non_minified_css,
            "inline_non_minified": inline_non_minified,
        },
    )


def check_schema_markup(ctx: RuleContext) -> CheckOutcome:
    schema = ctx.content.schema
    types = ", ".join(schema.types)
    if schema.detected:
        return CheckOutcome(
            title=t.SCHEMA_MARKUP,
            passed=True,
            description=f"Your page has schema markup implemented ({types or 'Unknown type'})",
            context=f"Schema markup found on page. Types detected: {types or 'Unknown'}",
            details={"types": list(schema.types)},
        )

    h1s = ctx.content.headings_at(1)
    h2s = ctx.content.headings_at(2)
    preview = " ".join(ctx.content.paragraphs[:2])[:200]
    context = "\n".join(
        [
            "No schema markup detected on page.",
            f"Page title: {ctx.content.title}",
            f"Meta description: {ctx.content.meta_description}",
            f"URL: {ctx.url}",
            f"First H1: {h1s[0].text if h1s else 'None'}",
            f"First few H2s: {', '.join(h.text for h in h2s[:3])}",
            f"Has images: {'Yes' if ctx.content.images else 'No'}",
            f"Is homepage: {'Yes' if ctx.is_home_page else 'No'}",
            f"Content preview: {preview}...",
        ]
    )
    return CheckOutcome(
        title=t.SCHEMA_MARKUP,
        passed=False,
        description="Your page is missing schema markup (structured data)",
        context=context,
        details={"suggested_types": suggest_schema_types(ctx.content, ctx.is_home_page)},
    )


Rule = Callable[[RuleContext], CheckOutcome]

RULES: tuple[Rule, ...] = (
    check_title,
    check_meta_description,
    check_url,
    check_content_length,
    check_density,
    check_introduction,
    check_image_alt,
    check_internal_links,
    check_outbound_links,
    check_next_gen_formats,
    check_og_image,
    check_og_title_description,
    check_h1,
    check_h2,
    check_heading_hierarchy,
    check_code_minification,
    check_schema_markup,
    check_image_file_size,
)
