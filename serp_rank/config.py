"""Runtime configuration read from the environment (and an optional .env)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

PROVIDER_SCRAPINGROBOT = "scrapingrobot"
PROVIDER_SERPER = "serper"
PROVIDERS = (PROVIDER_SCRAPINGROBOT, PROVIDER_SERPER)

# system_settings keys that override the environment
SETTING_PROVIDER = "search_engine_provider"
SETTING_SCRAPINGROBOT_KEY = "scrapingrobot_api_key"
SETTING_SERPER_KEY = "serper_api_key"

# Organic results requested per search; a domain outside them counts as not found
RESULTS_DEPTH = 100


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    try:
        return int(env.get(key, default))
    except (TypeError, ValueError):
        return default


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    try:
        return float(env.get(key, default))
    except (TypeError, ValueError):
        return default


@dataclass
class Settings:
    scrapingrobot_api_key: str = ""
    serper_api_key: str = ""
    search_engine_provider: str = PROVIDER_SCRAPINGROBOT
    scrapingrobot_module: str = "GoogleScraper"
    serper_language: str = "ar"
    http_timeout: int = 60
    http_retries: int = 3
    # Pause between consecutive requests, per provider
    scrapingrobot_delay: float = 1.0
    serper_delay: float = 0.5
    db_path: str = "serp_rank.sqlite"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from *env*, or from ``os.environ`` after loading ``.env``."""
        if env is None:
            load_dotenv()
            env = os.environ

        return cls(
            scrapingrobot_api_key=env.get("SCRAPINGROBOT_API_KEY", ""),
            serper_api_key=env.get("SERPER_API_KEY", ""),
            search_engine_provider=(
                env.get("SEARCH_ENGINE_PROVIDER") or PROVIDER_SCRAPINGROBOT
            ).lower(),
            scrapingrobot_module=env.get("SCRAPINGROBOT_MODULE") or "GoogleScraper",
            serper_language=env.get("SERPER_LANGUAGE") or "ar",
            http_timeout=_int(env, "HTTP_TIMEOUT", 60),
            http_retries=_int(env, "HTTP_RETRIES", 3),
            scrapingrobot_delay=_float(env, "SCRAPINGROBOT_DELAY", 1.0),
            serper_delay=_float(env, "SERPER_DELAY", 0.5),
            db_path=env.get("RANK_DB_PATH") or "serp_rank.sqlite",
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
