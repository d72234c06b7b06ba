"""Adapter for ScrapingRobot's ``GoogleScraper`` module.

API docs: https://scrapingrobot.com/api-documentation/

The API wraps every answer in a JSON envelope.  Depending on the module and
account settings, ``result`` is either the raw SERP HTML or an already
structured object::

    {"status": "SUCCESS", "result": "<!doctype html>..."}

    {
        "status": "SUCCESS",
        "result": {
            "organicResults": [
                {
                    "position": 1,
                    "title": "Pizza Hut",
                    "link": "https://www.pizzahut.com/",
                    "description": "Order pizza online …"
                }
            ],
            "searchInformation": {"totalResults": 1230000}
        }
    }

Failures come back as ``{"error": "..."}``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from serp_rank.adapters.base import BaseSerpAdapter, RawOrganic, text_field
from serp_rank.exceptions import ProviderResponseError
from serp_rank.html_parser import parse_organic_results, parse_total_results
from serp_rank.logging_setup import get_logger
from serp_rank.models import NormalizedSerpResult

logger = get_logger("adapters.scrapingrobot")


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    digits = "".join(ch for ch in str(value) if ch.isdigit())
    return int(digits) if digits else None


def _structured_total(result: Dict[str, Any]) -> Optional[int]:
    info = result.get("search_information") or {}
    total = info.get("total_results") if isinstance(info, dict) else None
    if not total:
        info = result.get("searchInformation") or {}
        total = info.get("totalResults") if isinstance(info, dict) else None
    return _to_int(total) or None


def _structured_organic(result: Dict[str, Any]) -> List[RawOrganic]:
    entries = result.get("organic_results") or result.get("organicResults") or []
    organic: List[RawOrganic] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        organic.append(
            (
                _to_int(entry.get("position")),
                text_field(entry, "title"),
                text_field(entry, "link", "url"),
                text_field(entry, "description", "snippet"),
            )
        )
    return organic


class ScrapingRobotAdapter(BaseSerpAdapter):
    """Normalize one ScrapingRobot response envelope."""

    provider = "scrapingrobot"

    def __init__(self, module: str = "GoogleScraper"):
        self.actor = module

    def normalize(
        self,
        raw: Any,
        query: str = "",
        country: str = "",
        device: str = "desktop",
    ) -> NormalizedSerpResult:
        if not isinstance(raw, dict):
            raise TypeError(f"Expected a dict, got {type(raw).__name__}")

        if raw.get("error"):
            raise ProviderResponseError(f"ScrapingRobot API error: {raw['error']}")

        result = raw.get("result")
        total: Optional[int] = None

        if isinstance(result, str):
            organic = [
                (r.position, r.title, r.link, r.description)
                for r in parse_organic_results(result)
            ]
            total = parse_total_results(result)
        elif isinstance(result, dict):
            organic = _structured_organic(result)
            total = _structured_total(result)
        else:
            logger.warning(
                "ScrapingRobot result for %r has unexpected type %s",
                query,
                type(result).__name__,
            )
            organic = []

        return self._result(
            self._items(organic),
            query=query,
            country=country,
            device=device,
            total_results=total,
            run_id=raw.get("requestId") or raw.get("id") or None,
        )
