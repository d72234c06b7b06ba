"""serp_rank.adapters package."""

from serp_rank.adapters.base import BaseSerpAdapter
from serp_rank.adapters.scrapingrobot import ScrapingRobotAdapter
from serp_rank.adapters.serper import SerperAdapter

__all__ = ["BaseSerpAdapter", "ScrapingRobotAdapter", "SerperAdapter"]
