"""Deterministic recommendation text.

Two kinds of generators live here:

* fallback templates for the keyphrase-placement checks, used when the
  completion backend is disabled or not configured;
* data-driven generators for the technical checks, which never go through
  the completion backend because their advice follows from measured values.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from seo_audit.analysis import titles as t
from seo_audit.analysis.rules import (
    MAX_DENSITY,
    MIN_DENSITY,
    MIN_MINIFIED_PERCENT,
    MIN_WORD_COUNT,
    format_bytes,
)

Details = Mapping[str, Any]

FALLBACK_TEMPLATES: dict[str, str] = {
    t.KEYPHRASE_IN_TITLE: "Consider rewriting your title to include '{keyphrase}', preferably at the beginning.",
    t.KEYPHRASE_IN_META_DESCRIPTION: "Add '{keyphrase}' to your meta description in a natural way that encourages clicks.",
    t.KEYPHRASE_IN_INTRODUCTION: "Mention '{keyphrase}' in your first paragraph to establish relevance early.",
    t.KEYPHRASE_IN_H1: "Include '{keyphrase}' in your main H1 heading to improve SEO.",
    t.KEYPHRASE_IN_H2: "Use '{keyphrase}' in at least one H2 subheading to reinforce topic relevance.",
    t.IMAGE_ALT_ATTRIBUTES: "Add descriptive alt text containing '{keyphrase}' to at least one relevant image.",
    t.INTERNAL_LINKS: "Add links to other relevant pages on your site to improve navigation and SEO.",
    t.OUTBOUND_LINKS: "Link to reputable external sources to increase your content's credibility.",
}


def generic_recommendation(check_title: str, keyphrase: str) -> str:
    return (
        f'Consider optimizing your content for the keyphrase "{keyphrase}" '
        f"in relation to {check_title.lower()}."
    )


def fallback_recommendation(check_title: str, keyphrase: str) -> str:
    template = FALLBACK_TEMPLATES.get(check_title)
    if template is None:
        return generic_recommendation(check_title, keyphrase)
    return template.format(keyphrase=keyphrase)


# ---------------------------------------------------------------------------
# Data-driven generators
# ---------------------------------------------------------------------------

def _bullets(items: list[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def schema_recommendation(keyphrase: str, details: Details) -> str:
    suggested = list(details.get("suggested_types") or [])
    if not suggested:
        suggested = ["WebPage Schema"]
    return (
        "**Recommended Schema for this page:**\n\n"
        f"{_bullets(suggested)}\n\n"
        "Tip: Test implementations with Google's Rich Results Test tool."
    )


def image_size_recommendation(keyphrase: str, details: Details) -> str:
    large = details.get("large_images") or []
    lines = [f"{image['label']} ({format_bytes(image.get('size'))})" for image in large]
    return (
        "Compress these large images to improve page load times:\n"
        f"{_bullets(lines)}\n\n"
        "Consider using tools like TinyPNG, Squoosh, or ImageOptim."
    )


def next_gen_recommendation(keyphrase: str, details: Details) -> str:
    if not details.get("image_count"):
        return (
            "No images found on the page. Consider adding relevant images using modern "
            "formats like WebP or AVIF to enhance user experience and page load times."
        )
    non_optimized = list(details.get("non_optimized") or [])
    return (
        "Convert these images to WebP or AVIF format for better performance:\n"
        f"{_bullets(non_optimized)}\n\n"
        "Use tools like cwebp or online converters to optimize these images."
    )


def content_length_recommendation(keyphrase: str, details: Details) -> str:
    words = details.get("word_count", 0)
    missing = max(MIN_WORD_COUNT - words, 0)
    return (
        f"Your page has {words} words. Add roughly {missing} more words of useful "
        f"content about '{keyphrase}' to reach at least {MIN_WORD_COUNT} words."
    )


def density_recommendation(keyphrase: str, details: Details) -> str:
    density = float(details.get("density", 0.0))
    occurrences = details.get("occurrences", 0)
    total = details.get("total_words", 0)
    current = f"Current density is {density:.1f}% ({occurrences} occurrences in {total} words)."
    if density > MAX_DENSITY:
        return (
            f"{current} Reduce repetitions of '{keyphrase}' and use synonyms so the "
            f"density falls below {MAX_DENSITY}%."
        )
    return (
        f"{current} Use '{keyphrase}' a few more times where it reads naturally to "
        f"reach at least {MIN_DENSITY}%."
    )


def hierarchy_recommendation(keyphrase: str, details: Details) -> str:
    issue = details.get("issue") or "Heading structure needs improvement"
    return (
        f"{issue}. Use a single H1 for the main topic, H2 headings for sections and "
        "H3 headings for subsections, without skipping levels."
    )


def minification_recommendation(keyphrase: str, details: Details) -> str:
    percentage = details.get("percentage", 0)
    parts = [
        f"Only {percentage}% of your JavaScript and CSS resources are minified. "
        f"Aim for at least {MIN_MINIFIED_PERCENT}%."
    ]
    js = list(details.get("non_minified_js") or [])
    css = list(details.get("non_minified_css") or [])
    if js:
        parts.append(f"Non-minified JavaScript files:\n{_bullets(js)}")
    if css:
        parts.append(f"Non-minified CSS files:\n{_bullets(css)}")
    if details.get("inline_non_minified"):
        parts.append("Inline scripts or styles on the page are not minified either.")
    parts.append("Use a build tool such as Terser or cssnano to minify these files.")
    return "\n\n".join(parts)


DETERMINISTIC_GENERATORS: dict[str, Callable[[str, Details], str]] = {
    t.SCHEMA_MARKUP: schema_recommendation,
    t.IMAGE_FILE_SIZE: image_size_recommendation,
    t.NEXT_GEN_IMAGE_FORMATS: next_gen_recommendation,
    t.CONTENT_LENGTH: content_length_recommendation,
    t.KEYPHRASE_DENSITY: density_recommendation,
    t.HEADING_HIERARCHY: hierarchy_recommendation,
    t.CODE_MINIFICATION: minification_recommendation,
}
