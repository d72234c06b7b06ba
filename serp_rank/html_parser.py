"""
Organic result extraction from raw Google SERP HTML.

Google's markup drifts, so results are read with an ordered list of
container strategies: the classic ``.g`` blocks first, and the newer
``.MjjYud`` wrappers only when no ``.g`` block produced a result.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Tag

from serp_rank.logging_setup import get_logger

logger = get_logger("html_parser")

DESCRIPTION_SELECTOR = ".VwiC3b, .IsZvec, .BmP5tf"
_RESULT_STATS_RE = re.compile(r"\d[\d,.\u00a0 ]*\d|\d")


@dataclass
class OrganicResult:
    """One organic entry as found in the page, before normalization."""

    position: int
    title: str
    link: str
    description: str = ""


def _text(element: Optional[Tag]) -> str:
    if element is None:
        return ""
    return " ".join(element.get_text(" ").split())


def clean_link(href: Optional[str]) -> str:
    """Unwrap Google ``/url?q=...`` redirects; return other links unchanged."""
    if not href:
        return ""
    href = href.strip()

    parsed = urlparse(href)
    is_google_host = not parsed.netloc or "google." in parsed.netloc
    if parsed.path == "/url" and is_google_host:
        params = parse_qs(parsed.query)
        for key in ("q", "url"):
            if params.get(key):
                return params[key][0]
    return href


def _is_organic(title: str, link: str) -> bool:
    return bool(title) and link.startswith("http") and "google.com/search" not in link


def _from_g_container(container: Tag) -> tuple[str, str, str]:
    link_el = container.find("a")
    return (
        _text(container.find("h3")),
        clean_link(link_el.get("href") if link_el else None),
        _text(container.select_one(DESCRIPTION_SELECTOR)),
    )


def _from_mjjyud_container(container: Tag) -> tuple[str, str, str]:
    link_el = next((a for a in container.find_all("a") if a.find("h3")), None)
    if link_el is None:
        link_el = container.select_one('a[href^="http"]')
    return (
        _text(container.find("h3")),
        clean_link(link_el.get("href") if link_el else None),
        _text(container.select_one(DESCRIPTION_SELECTOR)),
    )


def _collect(
    containers: List[Tag], extract: Callable[[Tag], tuple[str, str, str]]
) -> List[OrganicResult]:
    results: List[OrganicResult] = []
    for container in containers:
        title, link, description = extract(container)
        if _is_organic(title, link):
            results.append(
                OrganicResult(
                    position=len(results) + 1,
                    title=title,
                    link=link,
                    description=description,
                )
            )
    return results


def _outermost(containers: List[Tag], class_name: str) -> List[Tag]:
    # A result block nested in another block of the same class is the same result.
    return [c for c in containers if c.find_parent(class_=class_name) is None]


def parse_organic_results(html: str) -> List[OrganicResult]:
    """Return organic results in page order, positions starting at 1."""
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")

    results = _collect(_outermost(soup.select(".g"), "g"), _from_g_container)
    if results:
        logger.debug("Parsed %d organic results from .g containers", len(results))
        return results

    results = _collect(_outermost(soup.select(".MjjYud"), "MjjYud"), _from_mjjyud_container)
    logger.debug("Parsed %d organic results from .MjjYud containers", len(results))
    return results


def parse_total_results(html: str) -> Optional[int]:
    """Read the ``#result-stats`` counter ("About 1,230,000 results")."""
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")
    stats = soup.select_one("#result-stats")
    if stats is None:
        return None
    match = _RESULT_STATS_RE.search(_text(stats))
    if not match:
        return None
    digits = re.sub(r"\D", "", match.group(0))
    return int(digits) if digits else None
