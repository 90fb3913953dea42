"""Check identifiers, their priorities, and which ones never use the LLM."""

from __future__ import annotations

from typing import Literal

Priority = Literal["high", "medium", "low"]

KEYPHRASE_IN_TITLE = "Keyphrase in Title"
KEYPHRASE_IN_META_DESCRIPTION = "Keyphrase in Meta Description"
KEYPHRASE_IN_URL = "Keyphrase in URL"
CONTENT_LENGTH = "Content Length"
KEYPHRASE_DENSITY = "Keyphrase Density"
KEYPHRASE_IN_INTRODUCTION = "Keyphrase in Introduction"
IMAGE_ALT_ATTRIBUTES = "Image Alt Attributes"
INTERNAL_LINKS = "Internal Links"
OUTBOUND_LINKS = "Outbound Links"
NEXT_GEN_IMAGE_FORMATS = "Next-Gen Image Formats"
OG_IMAGE = "OG Image"
OG_TITLE_AND_DESCRIPTION = "OG Title and Description"
KEYPHRASE_IN_H1 = "Keyphrase in H1 Heading"
KEYPHRASE_IN_H2 = "Keyphrase in H2 Headings"
HEADING_HIERARCHY = "Heading Hierarchy"
CODE_MINIFICATION = "Code Minification"
SCHEMA_MARKUP = "Schema Markup"
IMAGE_FILE_SIZE = "Image File Size"

CHECK_PRIORITIES: dict[str, Priority] = {
    KEYPHRASE_IN_TITLE: "high",
    KEYPHRASE_IN_META_DESCRIPTION: "high",
    KEYPHRASE_IN_URL: "medium",
    CONTENT_LENGTH: "high",
    KEYPHRASE_DENSITY: "medium",
    KEYPHRASE_IN_INTRODUCTION: "medium",
    IMAGE_ALT_ATTRIBUTES: "low",
    INTERNAL_LINKS: "medium",
    OUTBOUND_LINKS: "low",
    NEXT_GEN_IMAGE_FORMATS: "low",
    OG_IMAGE: "medium",
    OG_TITLE_AND_DESCRIPTION: "medium",
    KEYPHRASE_IN_H1: "high",
    KEYPHRASE_IN_H2: "medium",
    HEADING_HIERARCHY: "high",
    CODE_MINIFICATION: "low",
    SCHEMA_MARKUP: "medium",
    IMAGE_FILE_SIZE: "medium",
}

# Recommendations for these are generated from measured page data only.
DETERMINISTIC_CHECKS = frozenset(
    {
        SCHEMA_MARKUP,
        IMAGE_FILE_SIZE,
        NEXT_GEN_IMAGE_FORMATS,
        CONTENT_LENGTH,
        KEYPHRASE_DENSITY,
        HEADING_HIERARCHY,
        CODE_MINIFICATION,
    }
)


def priority_for(title: str) -> Priority:
    return CHECK_PRIORITIES.get(title, "medium")
