"""On-page SEO auditing behind an SSRF-safe fetch gate."""

__version__ = "0.1.0"
