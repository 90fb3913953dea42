"""Centralised settings for the SEO audit service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_FALSE_VALUES = {"false", "0", "no", "off"}

DEFAULT_GPT_CHECKS = (
    "Keyphrase in Title",
    "Keyphrase in Meta Description",
    "Keyphrase in Introduction",
    "Keyphrase in H1 Heading",
    "Keyphrase in H2 Headings",
)


def _env_flag(name: str, default: bool = True) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def _env_list(name: str, default: tuple[str, ...] = ()) -> list[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Security gate
    # ------------------------------------------------------------------
    enforce_domain_allowlist: bool = field(
        default_factory=lambda: _env_flag("ENFORCE_DOMAIN_ALLOWLIST", True)
    )
    allowed_domains: list[str] = field(
        default_factory=lambda: _env_list("ALLOWED_DOMAINS")
    )

    # ------------------------------------------------------------------
    # Recommendations / completion backend
    # ------------------------------------------------------------------
    use_gpt_recommendations: bool = field(
        default_factory=lambda: _env_flag("USE_GPT_RECOMMENDATIONS", True)
    )
    openai_api_key: str = field(
        default_factory=lambda: os.environ.get("OPENAI_API_KEY", "")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    )
    enabled_gpt_checks: list[str] = field(
        default_factory=lambda: _env_list("ENABLED_GPT_CHECKS", DEFAULT_GPT_CHECKS)
    )
    recommendation_cache_ttl: float = field(
        default_factory=lambda: float(os.environ.get("RECOMMENDATION_CACHE_TTL", "86400"))
    )
    recommendation_max_tokens: int = field(
        default_factory=lambda: int(os.environ.get("RECOMMENDATION_MAX_TOKENS", "100"))
    )
    recommendation_temperature: float = field(
        default_factory=lambda: float(os.environ.get("RECOMMENDATION_TEMPERATURE", "0.5"))
    )

    # ------------------------------------------------------------------
    # Scraper
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    image_request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("IMAGE_REQUEST_TIMEOUT", "10.0"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )

    @property
    def has_valid_openai_key(self) -> bool:
        """``True`` when an OpenAI key is present and looks like a real one."""
        return bool(self.openai_api_key) and self.openai_api_key.startswith("sk-")

    @property
    def gpt_enabled(self) -> bool:
        """Whether recommendations may be routed to the completion backend."""
        return self.use_gpt_recommendations and self.has_valid_openai_key


def configure_logging(level: str | None = None) -> None:
    """Install a root handler once; later calls only adjust the level."""
    resolved = (level or settings.log_level).upper()
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(resolved)


# Module-level singleton, import this everywhere:
#   from seo_audit.config import settings
settings = Settings()
