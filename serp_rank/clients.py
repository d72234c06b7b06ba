"""
HTTP clients for the SERP scraping providers.

Both clients share one ``requests.Session`` with retries on 429/5xx and
return the decoded JSON body; turning it into results is the adapters' job.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from serp_rank.config import PROVIDER_SCRAPINGROBOT, PROVIDER_SERPER, RESULTS_DEPTH
from serp_rank.exceptions import (
    ProviderHTTPError,
    ProviderNotConfigured,
    ProviderRequestError,
    ProviderResponseError,
)
from serp_rank.logging_setup import get_logger

logger = get_logger("clients")

SCRAPINGROBOT_API_URL = "https://api.scrapingrobot.com/"
SERPER_API_URL = "https://google.serper.dev/search"


def build_session(retries: int = 3, backoff_factor: float = 0.5) -> requests.Session:
    s = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=frozenset({"GET", "POST"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    return s


def google_search_url(keyword: str, num: int = RESULTS_DEPTH) -> str:
    return f"https://www.google.com/search?q={quote(keyword, safe='')}&num={num}"


def _decode(provider: str, resp: requests.Response) -> Dict[str, Any]:
    if not resp.ok:
        raise ProviderHTTPError(provider, resp.status_code, resp.text)
    try:
        data = resp.json()
    except ValueError as exc:
        raise ProviderResponseError(f"{provider} returned a non-JSON body") from exc
    if not isinstance(data, dict):
        raise ProviderResponseError(
            f"{provider} returned {type(data).__name__}, expected an object"
        )
    return data


class ScrapingRobotClient:
    """GET client for ScrapingRobot's Google scraper."""

    provider = PROVIDER_SCRAPINGROBOT
    env_var = "SCRAPINGROBOT_API_KEY"

    def __init__(
        self,
        api_key: str,
        module: str = "GoogleScraper",
        timeout: int = 60,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.module = module
        self.timeout = timeout
        self.session = session or build_session()

    def build_params(self, keyword: str, country: str, device: str = "desktop") -> Dict[str, str]:
        params = {
            "token": self.api_key,
            "url": google_search_url(keyword),
            "module": self.module,
            "json": "1",
            "country": (country or "").upper(),
        }
        if device == "mobile":
            params["mobile"] = "1"
        return params

    def search(self, keyword: str, country: str, device: str = "desktop") -> Dict[str, Any]:
        if not self.api_key:
            raise ProviderNotConfigured(self.provider, self.env_var)

        logger.info("ScrapingRobot search %r (country=%s, device=%s)", keyword, country, device)
        try:
            resp = self.session.get(
                SCRAPINGROBOT_API_URL,
                params=self.build_params(keyword, country, device),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderRequestError(f"ScrapingRobot request failed: {exc}") from exc
        return _decode("ScrapingRobot", resp)


class SerperClient:
    """POST client for Serper.dev."""

    provider = PROVIDER_SERPER
    env_var = "SERPER_API_KEY"

    def __init__(
        self,
        api_key: str,
        language: str = "ar",
        timeout: int = 60,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.language = language
        self.timeout = timeout
        self.session = session or build_session()

    def build_payload(self, keyword: str, country: str, device: str = "desktop") -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "q": keyword,
            "num": RESULTS_DEPTH,
            "gl": (country or "").lower(),
            "hl": self.language,
        }
        if device == "mobile":
            payload["device"] = "mobile"
        return payload

    def search(self, keyword: str, country: str, device: str = "desktop") -> Dict[str, Any]:
        if not self.api_key:
            raise ProviderNotConfigured(self.provider, self.env_var)

        logger.info("Serper search %r (country=%s, device=%s)", keyword, country, device)
        try:
            resp = self.session.post(
                SERPER_API_URL,
                json=self.build_payload(keyword, country, device),
                headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ProviderRequestError(f"Serper request failed: {exc}") from exc
        return _decode("Serper", resp)
