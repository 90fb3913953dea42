"""Security package — URL validation, allowlisting and SSRF defence."""

from seo_audit.security.allowlist import DomainAllowlist, is_valid_domain
from seo_audit.security.gate import (
    GateResult,
    UrlSecurityGate,
    is_blocked_address,
    is_homepage,
    normalise_url,
)

__all__ = [
    "DomainAllowlist",
    "GateResult",
    "UrlSecurityGate",
    "is_blocked_address",
    "is_homepage",
    "is_valid_domain",
    "normalise_url",
]
