"""Tests for environment-driven settings."""

from serp_rank.config import Settings


def test_defaults():
    settings = Settings.from_env({})
    assert settings.search_engine_provider == "scrapingrobot"
    assert settings.scrapingrobot_module == "GoogleScraper"
    assert settings.serper_language == "ar"
    assert settings.http_timeout == 60
    assert settings.scrapingrobot_delay == 1.0
    assert settings.serper_delay == 0.5


def test_values_from_env():
    settings = Settings.from_env(
        {
            "SCRAPINGROBOT_API_KEY": "sr",
            "SERPER_API_KEY": "sp",
            "SEARCH_ENGINE_PROVIDER": "Serper",
            "HTTP_TIMEOUT": "15",
            "RANK_DB_PATH": "/tmp/rank.sqlite",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.scrapingrobot_api_key == "sr"
    assert settings.serper_api_key == "sp"
    assert settings.search_engine_provider == "serper"
    assert settings.http_timeout == 15
    assert settings.db_path == "/tmp/rank.sqlite"
    assert settings.log_level == "DEBUG"


def test_bad_numbers_fall_back_to_defaults():
    settings = Settings.from_env({"HTTP_TIMEOUT": "soon", "SERPER_DELAY": "x"})
    assert settings.http_timeout == 60
    assert settings.serper_delay == 0.5


def test_from_process_environment(monkeypatch):
    monkeypatch.setenv("SERPER_API_KEY", "from-os")
    monkeypatch.setattr("serp_rank.config.load_dotenv", lambda: False)
    assert Settings.from_env().serper_api_key == "from-os"
