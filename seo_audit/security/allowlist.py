"""Process-wide domain allowlist.

Entries are either exact hostnames (``example.com``) or wildcard entries
(``*.example.com``) that admit any strictly longer hostname ending in the base
domain.  The list is append-only for the lifetime of the process; duplicate
registrations are detected under the lock, so concurrent requests registering
the same domain mutate the list at most once.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Iterable

logger = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(
    r"^(\*\.)?(?=.{1,253}$)([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)"
    r"(\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)*$"
)


def normalise_domain(domain: str) -> str:
    return domain.strip().lower()


def is_valid_domain(domain: str) -> bool:
    """Return ``True`` if *domain* is a syntactically valid (wildcard) hostname."""
    return bool(_DOMAIN_RE.match(normalise_domain(domain)))


class DomainAllowlist:
    """Thread-safe, append-only set of permitted scrape targets."""

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._entries: list[str] = []
        for domain in initial:
            self._append(normalise_domain(domain))

    def _append(self, entry: str) -> bool:
        if not entry or entry in self._entries:
            return False
        self._entries.append(entry)
        return True

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, domain: str) -> bool:
        """Register *domain* and its ``*.domain`` wildcard form.

        Returns ``True`` if at least one entry was newly added.  Calling it
        again with the same domain, in any casing, is a no-op.
        """
        entry = normalise_domain(domain)
        if not entry:
            return False

        with self._lock:
            if entry in self._entries:
                logger.debug("Domain already in allowlist: %s", entry)
                return False
            added = self._append(entry)
            if not entry.startswith("*."):
                added = self._append(f"*.{entry}") or added
            size = len(self._entries)

        logger.info("Added %s to allowlist (%d entries)", entry, size)
        return added

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def entries(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def is_allowed(self, hostname: str) -> bool:
        """Exact (case-insensitive) or wildcard-suffix match against the list."""
        host = normalise_domain(hostname)
        if not host:
            return False

        with self._lock:
            entries = list(self._entries)

        if host in entries:
            return True

        for entry in entries:
            if entry.startswith("*."):
                base = entry[2:]
                if host.endswith(base) and len(host) > len(base):
                    return True
        return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, domain: object) -> bool:
        if not isinstance(domain, str):
            return False
        with self._lock:
            return normalise_domain(domain) in self._entries
