"""Keyword rank checks against the configured SERP provider."""

from __future__ import annotations

import sqlite3
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import requests

from serp_rank.adapters import BaseSerpAdapter, ScrapingRobotAdapter, SerperAdapter
from serp_rank.clients import ScrapingRobotClient, SerperClient, build_session
from serp_rank.config import (
    PROVIDER_SCRAPINGROBOT,
    PROVIDER_SERPER,
    PROVIDERS,
    RESULTS_DEPTH,
    SETTING_PROVIDER,
    SETTING_SCRAPINGROBOT_KEY,
    SETTING_SERPER_KEY,
    Settings,
)
from serp_rank.exceptions import SerpRankError, UnknownProviderError
from serp_rank.hostnames import hostname_of, matches_domain, normalize_hostname
from serp_rank.logging_setup import get_logger
from serp_rank.models import (
    LookupResult,
    NormalizedSerpResult,
    RankingResult,
    SerpResultItem,
    TrackedKeyword,
)

logger = get_logger("ranking")

_KEY_SETTINGS = {
    PROVIDER_SCRAPINGROBOT: SETTING_SCRAPINGROBOT_KEY,
    PROVIDER_SERPER: SETTING_SERPER_KEY,
}


def find_domain_position(
    results: Iterable[SerpResultItem], domain: str
) -> Tuple[Optional[int], Optional[str]]:
    """Return ``(position, url)`` of the first result hosted on *domain*.

    Subdomains count as the domain; results whose link has no hostname are
    skipped.  ``(None, None)`` when the domain does not appear.
    """
    target = normalize_hostname(domain)
    for item in results:
        host = hostname_of(item.url)
        if not host:
            continue
        if matches_domain(host, target):
            return item.rank, item.url
    return None, None


class RankingService:
    """Fetch SERPs through one provider and locate a domain in them.

    The provider and API keys are read from the store's system settings on
    every call, so they can be switched at runtime; the environment
    (:class:`~serp_rank.config.Settings`) is the fallback.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store=None,
        clients: Optional[Dict[str, object]] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or Settings()
        self.store = store
        self._clients = dict(clients or {})
        self._session = session
        self._sleep = sleep
        self._adapters: Dict[str, BaseSerpAdapter] = {
            PROVIDER_SCRAPINGROBOT: ScrapingRobotAdapter(self.settings.scrapingrobot_module),
            PROVIDER_SERPER: SerperAdapter(),
        }

    def _setting(self, key: str) -> Optional[str]:
        if self.store is None:
            return None
        try:
            return self.store.get_system_setting(key)
        except sqlite3.Error as exc:
            logger.warning("Failed to read system setting %s, using environment: %s", key, exc)
            return None

    def provider(self) -> str:
        name = (self._setting(SETTING_PROVIDER) or self.settings.search_engine_provider).lower()
        if name not in PROVIDERS:
            raise UnknownProviderError(f"Unknown search engine provider: {name}")
        return name

    def _api_key(self, provider: str) -> str:
        stored = self._setting(_KEY_SETTINGS[provider])
        if stored:
            return stored
        if provider == PROVIDER_SERPER:
            return self.settings.serper_api_key
        return self.settings.scrapingrobot_api_key

    def client_for(self, provider: str):
        if provider in self._clients:
            return self._clients[provider]
        if self._session is None:
            self._session = build_session(self.settings.http_retries)
        if provider == PROVIDER_SERPER:
            return SerperClient(
                self._api_key(provider),
                language=self.settings.serper_language,
                timeout=self.settings.http_timeout,
                session=self._session,
            )
        return ScrapingRobotClient(
            self._api_key(provider),
            module=self.settings.scrapingrobot_module,
            timeout=self.settings.http_timeout,
            session=self._session,
        )

    def request_delay(self, provider: str) -> float:
        if provider == PROVIDER_SERPER:
            return self.settings.serper_delay
        return self.settings.scrapingrobot_delay

    def fetch_serp(
        self, keyword: TrackedKeyword, provider: Optional[str] = None
    ) -> NormalizedSerpResult:
        provider = provider or self.provider()
        raw = self.client_for(provider).search(
            keyword.keyword, keyword.target_location, keyword.device_type
        )
        return self._adapters[provider].normalize(
            raw,
            query=keyword.keyword,
            country=keyword.target_location,
            device=keyword.device_type,
        )

    def check_keyword_ranking(
        self, keyword: TrackedKeyword, provider: Optional[str] = None
    ) -> RankingResult:
        try:
            serp = self.fetch_serp(keyword, provider)
        except SerpRankError as exc:
            logger.error("Error checking ranking for keyword %s: %s", keyword.id, exc)
            raise

        position, matched_url = find_domain_position(serp.results, keyword.domain)
        return RankingResult(
            keyword_id=keyword.id,
            position=position,
            search_volume=serp.total_results,
            found=position is not None,
            domain=keyword.domain,
            matched_url=matched_url,
        )

    def check_multiple_keyword_rankings(
        self, keywords: List[TrackedKeyword], provider: Optional[str] = None
    ) -> List[RankingResult]:
        """Check *keywords* one at a time, pausing between provider calls."""
        provider = provider or self.provider()
        delay = self.request_delay(provider)
        results = []
        for idx, keyword in enumerate(keywords):
            results.append(self.check_keyword_ranking(keyword, provider))
            if idx < len(keywords) - 1 and delay > 0:
                self._sleep(delay)
        return results

    def get_search_results(
        self, keyword: TrackedKeyword, provider: Optional[str] = None
    ) -> List[SerpResultItem]:
        return self.fetch_serp(keyword, provider).results

    def instant_lookup(
        self,
        keyword_text: str,
        domain: str,
        location: str = "US",
        device: str = "desktop",
        provider: Optional[str] = None,
    ) -> LookupResult:
        """Check a keyword for a domain without anything being tracked or stored."""
        keyword = TrackedKeyword(
            id="instant-lookup",
            keyword=keyword_text,
            domain=domain,
            target_location=location,
            device_type=device,
        )
        result = self.check_keyword_ranking(keyword, provider)
        return LookupResult(
            position=result.position,
            found=result.found,
            matched_url=result.matched_url,
            total_results=RESULTS_DEPTH,
            search_volume=result.search_volume,
        )
