"""Tests for serp_rank.models."""

from serp_rank.models import (
    Location,
    LookupResult,
    NormalizedSerpResult,
    RankingResult,
    SerpResultItem,
    SerpSource,
    TrackedKeyword,
)


class TestLocation:
    def test_required_field(self):
        loc = Location(country="SA")
        assert loc.country == "SA"
        assert loc.region is None
        assert loc.city is None


class TestSerpSource:
    def test_defaults(self):
        source = SerpSource(provider="scrapingrobot")
        assert source.provider == "scrapingrobot"
        assert source.actor is None
        assert source.run_id is None


class TestNormalizedSerpResult:
    def _make_result(self, **kwargs):
        defaults = dict(
            query="pizza",
            location=Location(country="US"),
            device="desktop",
            engine="google",
            ts=1761330000,
        )
        defaults.update(kwargs)
        return NormalizedSerpResult(**defaults)

    def test_minimal_construction(self):
        result = self._make_result()
        assert result.query == "pizza"
        assert result.results == []
        assert result.source is None
        assert result.total_results is None

    def test_results_lists_are_not_shared(self):
        a = self._make_result()
        b = self._make_result()
        a.results.append(
            SerpResultItem(rank=1, title="A", url="https://a.com", domain="a.com", snippet="")
        )
        assert b.results == []


class TestTrackedKeyword:
    def test_defaults(self):
        kw = TrackedKeyword(id="k1", keyword="pizza", domain="example.com")
        assert kw.target_location == "US"
        assert kw.device_type == "desktop"
        assert kw.user_id is None


class TestRankingResult:
    def test_to_dict(self):
        result = RankingResult(
            keyword_id="k1",
            position=3,
            search_volume=1000,
            found=True,
            domain="example.com",
            matched_url="https://example.com/",
        )
        assert result.to_dict() == {
            "keyword_id": "k1",
            "position": 3,
            "search_volume": 1000,
            "found": True,
            "domain": "example.com",
            "matched_url": "https://example.com/",
            "error": None,
        }


class TestLookupResult:
    def test_to_dict(self):
        result = LookupResult(
            position=None, found=False, matched_url=None, total_results=100, search_volume=None
        )
        assert result.to_dict()["total_results"] == 100
        assert result.to_dict()["found"] is False
