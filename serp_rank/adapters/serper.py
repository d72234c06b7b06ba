"""Adapter for the Serper.dev Google Search API.

Example raw response (abbreviated)::

    {
        "searchParameters": {"q": "pizza", "gl": "us", "hl": "ar", "num": 100},
        "organic": [
            {
                "position": 1,
                "title": "Pizza Hut",
                "link": "https://www.pizzahut.com/",
                "snippet": "Order pizza online …"
            }
        ],
        "searchInformation": {"totalResults": "1,230,000"}
    }
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from serp_rank.adapters.base import BaseSerpAdapter, text_field
from serp_rank.models import NormalizedSerpResult


def _position(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _parse_total(raw: Dict[str, Any]) -> Optional[int]:
    info = raw.get("searchInformation") or {}
    total = info.get("totalResults") if isinstance(info, dict) else None
    if total is None:
        return None
    digits = str(total).replace(",", "").strip()
    try:
        return int(digits)
    except ValueError:
        return None


class SerperAdapter(BaseSerpAdapter):
    """Normalize a Serper.dev ``/search`` response."""

    provider = "serper"
    actor = "google.serper.dev/search"

    def normalize(
        self,
        raw: Any,
        query: str = "",
        country: str = "",
        device: str = "desktop",
    ) -> NormalizedSerpResult:
        if not isinstance(raw, dict):
            raise TypeError(f"Expected a dict, got {type(raw).__name__}")

        params: Dict[str, Any] = raw.get("searchParameters") or {}

        organic = [
            (
                _position(item.get("position")),
                text_field(item, "title"),
                text_field(item, "link"),
                text_field(item, "snippet"),
            )
            for item in raw.get("organic") or []
            if isinstance(item, dict)
        ]

        return self._result(
            self._items(organic),
            query=query or params.get("q") or "",
            country=country or params.get("gl") or "",
            device=device,
            total_results=_parse_total(raw),
        )
