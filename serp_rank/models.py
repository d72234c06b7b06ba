"""Normalized SERP and ranking models.

Every SERP provider adapter converts its raw response into a
:class:`NormalizedSerpResult`.  Ranking checks, instant lookups and the
scheduler read *only* this format, plus the small record types below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Location:
    """Geographic targeting for the SERP query."""

    country: str  # ISO 3166-1 alpha-2, e.g. "US"
    region: Optional[str] = None  # State / province code, e.g. "CA"
    city: Optional[str] = None  # City name, e.g. "Riyadh"


@dataclass
class SerpResultItem:
    """A single organic result inside a SERP."""

    rank: int
    title: str
    url: str
    domain: str
    snippet: str


@dataclass
class SerpSource:
    """Provenance metadata – which provider/module produced the raw data."""

    provider: str  # e.g. "scrapingrobot"
    actor: Optional[str] = None  # e.g. "GoogleScraper"
    run_id: Optional[str] = None  # Provider-specific request identifier


@dataclass
class NormalizedSerpResult:
    """Canonical, provider-agnostic representation of a SERP response.

    Example::

        NormalizedSerpResult(
            query="pizza",
            location=Location(country="US"),
            device="desktop",
            engine="google",
            ts=1761330000,
            results=[
                SerpResultItem(rank=1, title="...", url="...",
                               domain="...", snippet="..."),
            ],
            source=SerpSource(provider="scrapingrobot", actor="GoogleScraper"),
            total_results=1230000,
        )
    """

    query: str
    location: Location
    device: str  # "desktop" | "mobile"
    engine: str  # "google"
    ts: int  # Unix timestamp (seconds) of when the SERP was fetched
    results: List[SerpResultItem] = field(default_factory=list)
    source: Optional[SerpSource] = None
    total_results: Optional[int] = None  # "About N results", when reported


@dataclass
class TrackedKeyword:
    """A keyword tracked for one domain, as read from the store."""

    id: str
    keyword: str
    domain: str
    target_location: str = "US"
    device_type: str = "desktop"
    user_id: Optional[str] = None


@dataclass
class RankingResult:
    """Outcome of checking one keyword against one domain."""

    keyword_id: str
    position: Optional[int]
    search_volume: Optional[int]
    found: bool
    domain: str
    matched_url: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "keyword_id": self.keyword_id,
            "position": self.position,
            "search_volume": self.search_volume,
            "found": self.found,
            "domain": self.domain,
            "matched_url": self.matched_url,
            "error": self.error,
        }


@dataclass
class LookupResult:
    """Result of an ad-hoc keyword lookup that is not persisted."""

    position: Optional[int]
    found: bool
    matched_url: Optional[str]
    total_results: int
    search_volume: Optional[int]

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "found": self.found,
            "matched_url": self.matched_url,
            "total_results": self.total_results,
            "search_volume": self.search_volume,
        }


@dataclass
class RankChange:
    """A position change worth notifying the keyword owner about."""

    keyword_id: str
    user_id: Optional[str]
    kind: str  # position_improved | position_declined | position_found | position_lost
    title: str
    message: str
    old_position: Optional[int]
    new_position: Optional[int]
