"""serp_rank – keyword rank tracking over third-party SERP scraping APIs."""

from serp_rank.models import (
    Location,
    LookupResult,
    NormalizedSerpResult,
    RankChange,
    RankingResult,
    SerpResultItem,
    SerpSource,
    TrackedKeyword,
)
from serp_rank.adapters.base import BaseSerpAdapter
from serp_rank.adapters.scrapingrobot import ScrapingRobotAdapter
from serp_rank.adapters.serper import SerperAdapter
from serp_rank.config import Settings
from serp_rank.hostnames import hostname_of, matches_domain, normalize_hostname
from serp_rank.html_parser import parse_organic_results, parse_total_results
from serp_rank.ranking import RankingService, find_domain_position
from serp_rank.rank_changes import classify_rank_change
from serp_rank.scheduler import RankingScheduler
from serp_rank.store import RankStore

__all__ = [
    "Location",
    "LookupResult",
    "NormalizedSerpResult",
    "RankChange",
    "RankingResult",
    "SerpResultItem",
    "SerpSource",
    "TrackedKeyword",
    "BaseSerpAdapter",
    "ScrapingRobotAdapter",
    "SerperAdapter",
    "Settings",
    "hostname_of",
    "matches_domain",
    "normalize_hostname",
    "parse_organic_results",
    "parse_total_results",
    "RankingService",
    "find_domain_position",
    "classify_rank_change",
    "RankingScheduler",
    "RankStore",
]
