"""Hostname normalization and domain matching for rank checks."""

from __future__ import annotations

import re
from urllib.parse import urlparse

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def _strip_www(host: str) -> str:
    return host.removeprefix("www.")


def normalize_hostname(value: str) -> str:
    """Return the bare, lower-cased hostname of a domain or URL.

    ``"https://www.Example.com/path"`` and ``"example.com"`` both give
    ``"example.com"``.  Values without a scheme are parsed as ``https://``.
    """
    raw = (value or "").strip()
    if not raw:
        return ""

    candidate = raw if _SCHEME_RE.match(raw) else f"https://{raw}"
    try:
        host = urlparse(candidate).hostname
    except ValueError:
        host = None

    if host:
        return _strip_www(host.lower())

    cleaned = _SCHEME_RE.sub("", raw).lower()
    cleaned = _strip_www(cleaned)
    return cleaned.split("/")[0]


def hostname_of(url: str) -> str:
    """Hostname of an absolute result link, or ``""`` when it has none."""
    if not isinstance(url, str):
        return ""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return _strip_www(host.lower())


def matches_domain(result_host: str, target: str) -> bool:
    """True when *result_host* is *target* or one of its subdomains."""
    if not target or not result_host:
        return False
    return result_host == target or result_host.endswith(f".{target}")
