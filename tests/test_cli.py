"""Tests for the serp-rank command line."""

import json

import pytest

from serp_rank import cli
from serp_rank.config import Settings
from serp_rank.exceptions import ProviderNotConfigured
from serp_rank.models import LookupResult
from serp_rank.store import RankStore

ENVELOPE = {
    "status": "SUCCESS",
    "result": """
        <div class="g"><a href="https://other.com/"><h3>Other</h3></a></div>
        <div class="g"><a href="https://www.example.com/menu"><h3>Example menu</h3></a></div>
    """,
}


@pytest.fixture()
def envelope_file(tmp_path):
    path = tmp_path / "response.json"
    path.write_text(json.dumps(ENVELOPE), encoding="utf-8")
    return path


def test_parse_reports_domain_position(envelope_file, capsys):
    code = cli.main(["parse", str(envelope_file), "--domain", "example.com"], settings=Settings())
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["result_count"] == 2
    assert out["found"] is True
    assert out["position"] == 2
    assert out["matched_url"] == "https://www.example.com/menu"
    assert "results" not in out


def test_parse_show_results(envelope_file, capsys):
    cli.main(["parse", str(envelope_file), "--show-results"], settings=Settings())
    out = json.loads(capsys.readouterr().out)
    assert [r["domain"] for r in out["results"]] == ["other.com", "example.com"]


def test_parse_error_envelope_exits_1(tmp_path, capsys):
    path = tmp_path / "error.json"
    path.write_text(json.dumps({"error": "Invalid token"}), encoding="utf-8")
    code = cli.main(["parse", str(path)], settings=Settings())
    assert code == 1
    assert "Invalid token" in capsys.readouterr().err


def test_parse_missing_file_exits_2(tmp_path, capsys):
    code = cli.main(["parse", str(tmp_path / "nope.json")], settings=Settings())
    assert code == 2


def test_lookup(monkeypatch, capsys):
    calls = []

    def fake_lookup(self, keyword_text, domain, location="US", device="desktop", provider=None):
        calls.append((keyword_text, domain, location, device, provider))
        return LookupResult(position=3, found=True, matched_url="https://example.com/",
                            total_results=100, search_volume=None)

    monkeypatch.setattr(cli.RankingService, "instant_lookup", fake_lookup)
    code = cli.main(
        ["lookup", "pizza", "example.com", "--country", "SA", "--device", "mobile"],
        settings=Settings(),
    )
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["position"] == 3
    assert calls == [("pizza", "example.com", "SA", "mobile", None)]


def test_lookup_without_api_key_exits_1(capsys):
    code = cli.main(["lookup", "pizza", "example.com"], settings=Settings(scrapingrobot_api_key=""))
    assert code == 1
    assert "SCRAPINGROBOT_API_KEY" in capsys.readouterr().err


def test_check_all_on_empty_db(tmp_path, capsys):
    db = tmp_path / "rank.sqlite"
    code = cli.main(["check-all", "--db", str(db)], settings=Settings())
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["checked"] == 0


def test_check_all_reports_failed_batches(tmp_path, capsys):
    db = tmp_path / "rank.sqlite"
    with RankStore(str(db)) as store:
        domain_id = store.add_domain("example.com")
        store.add_keyword(domain_id, "pizza")

    # No API key configured: the batch fails, the run still completes.
    code = cli.main(["check-all", "--db", str(db)], settings=Settings())
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["failed_batches"] == 1


def test_provider_not_configured_message():
    assert str(ProviderNotConfigured("serper", "SERPER_API_KEY")) == "SERPER_API_KEY is not configured"


def test_parse_invalid_json_exits_2(tmp_path, capsys):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    code = cli.main(["parse", str(path)], settings=Settings())
    assert code == 2
    assert "cannot read" in capsys.readouterr().err


def test_parse_non_object_exits_2(tmp_path, capsys):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]", encoding="utf-8")
    code = cli.main(["parse", str(path)], settings=Settings())
    assert code == 2
    assert "JSON object" in capsys.readouterr().err


def test_unexpected_errors_are_not_mapped_to_exit_codes(monkeypatch):
    def broken_lookup(self, *args, **kwargs):
        raise ValueError("bug")

    monkeypatch.setattr(cli.RankingService, "instant_lookup", broken_lookup)
    with pytest.raises(ValueError, match="bug"):
        cli.main(["lookup", "pizza", "example.com"], settings=Settings())


def test_serve_waits_for_scheduler_before_closing_store(tmp_path, monkeypatch):
    calls = []

    def fake_start(self, interval_hours=6):
        calls.append(("start", interval_hours))

    def fake_wait(self):
        raise KeyboardInterrupt

    def fake_stop(self, timeout=None):
        calls.append(("stop", timeout))
        return True

    monkeypatch.setattr(cli.RankingScheduler, "start", fake_start)
    monkeypatch.setattr(cli.RankingScheduler, "wait", fake_wait)
    monkeypatch.setattr(cli.RankingScheduler, "stop", fake_stop)

    code = cli.main(["serve", "--db", str(tmp_path / "rank.sqlite"), "--interval-hours", "2"],
                    settings=Settings())
    assert code == 0
    assert calls == [("start", 2.0), ("stop", None)]
