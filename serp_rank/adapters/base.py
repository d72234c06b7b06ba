"""Abstract base class for SERP adapters."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from serp_rank.hostnames import hostname_of
from serp_rank.models import (
    Location,
    NormalizedSerpResult,
    SerpResultItem,
    SerpSource,
)

# (position, title, link, snippet) as read from a provider payload
RawOrganic = Tuple[Optional[int], str, str, str]


def text_field(entry: Dict[str, Any], *keys: str) -> str:
    """First non-empty string under *keys*; other value types are ignored."""
    for key in keys:
        value = entry.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


class BaseSerpAdapter(ABC):
    """Contract that every SERP provider adapter must satisfy.

    Provider payloads rarely echo the request, so the query, country and
    device the caller asked for are passed alongside *raw*.
    """

    provider: str = ""
    actor: Optional[str] = None

    @abstractmethod
    def normalize(
        self,
        raw: Any,
        query: str = "",
        country: str = "",
        device: str = "desktop",
    ) -> NormalizedSerpResult:
        """Convert *raw* provider output to a :class:`NormalizedSerpResult`.

        Parameters
        ----------
        raw:
            The raw data returned by the provider.  The expected type is
            specific to each concrete adapter.
        query, country, device:
            The search the payload answers.

        Returns
        -------
        NormalizedSerpResult
        """

    def _items(self, organic: Iterable[RawOrganic]) -> List[SerpResultItem]:
        results: List[SerpResultItem] = []
        for position, title, link, snippet in organic:
            results.append(
                SerpResultItem(
                    rank=position or len(results) + 1,
                    title=title,
                    url=link,
                    domain=hostname_of(link),
                    snippet=snippet,
                )
            )
        return results

    def _result(
        self,
        items: List[SerpResultItem],
        query: str,
        country: str,
        device: str,
        total_results: Optional[int] = None,
        run_id: Optional[str] = None,
    ) -> NormalizedSerpResult:
        return NormalizedSerpResult(
            query=query,
            location=Location(country=(country or "").upper()),
            device="mobile" if device == "mobile" else "desktop",
            engine="google",
            ts=int(time.time()),
            results=items,
            source=SerpSource(provider=self.provider, actor=self.actor, run_id=run_id),
            total_results=total_results,
        )
