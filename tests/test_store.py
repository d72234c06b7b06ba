"""Tests for the SQLite rank store."""

import sqlite3

import pytest

from serp_rank.models import RankChange
from serp_rank.store import RankStore


@pytest.fixture()
def store():
    store = RankStore(":memory:")
    yield store
    store.close()


def test_schema_tables_exist(store):
    tables = {
        row[0]
        for row in store.conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    }
    assert {"domains", "keywords", "keyword_rankings", "notifications", "system_settings"} <= tables


def test_active_keywords_join_active_domains(store):
    live = store.add_domain("example.com", user_id="u1")
    paused = store.add_domain("paused.com", user_id="u1", active=False)
    k1 = store.add_keyword(live, "pizza", target_location="sa", device_type="mobile", user_id="u1")
    store.add_keyword(live, "burger", user_id="u1", active=False)
    store.add_keyword(paused, "pasta", user_id="u1")

    keywords = store.get_active_keywords_with_domain()

    assert [k.id for k in keywords] == [k1]
    kw = keywords[0]
    assert kw.keyword == "pizza"
    assert kw.domain == "example.com"
    assert kw.target_location == "SA"
    assert kw.device_type == "mobile"
    assert kw.user_id == "u1"


def test_keyword_requires_existing_domain(store):
    with pytest.raises(sqlite3.IntegrityError):
        store.add_keyword("missing", "pizza")


def test_latest_ranking_is_most_recent_row(store):
    domain_id = store.add_domain("example.com")
    kid = store.add_keyword(domain_id, "pizza")
    assert store.get_latest_keyword_ranking(kid) is None

    store.create_keyword_ranking(kid, 8)
    store.create_keyword_ranking(kid, None)

    latest = store.get_latest_keyword_ranking(kid)
    assert latest["keyword_id"] == kid
    assert latest["position"] is None


def test_notifications_roundtrip_and_filter(store):
    domain_id = store.add_domain("example.com")
    kid = store.add_keyword(domain_id, "pizza", user_id="u1")
    store.create_notification(
        RankChange(
            keyword_id=kid,
            user_id="u1",
            kind="position_found",
            title="Website found",
            message="found",
            old_position=None,
            new_position=4,
        )
    )

    rows = store.list_notifications("u1")
    assert len(rows) == 1
    assert rows[0]["type"] == "position_found"
    assert rows[0]["new_position"] == 4
    assert rows[0]["is_read"] == 0
    assert store.list_notifications("someone-else") == []


def test_system_settings_upsert(store):
    assert store.get_system_setting("search_engine_provider") is None
    store.set_system_setting("search_engine_provider", "serper")
    store.set_system_setting("search_engine_provider", "scrapingrobot")
    assert store.get_system_setting("search_engine_provider") == "scrapingrobot"


def test_file_backed_store(tmp_path):
    path = tmp_path / "rank.sqlite"
    with RankStore(str(path)) as store:
        store.set_system_setting("serper_api_key", "abc")
    with RankStore(str(path)) as store:
        assert store.get_system_setting("serper_api_key") == "abc"


def _change(kid, kind="position_found", new_position=1):
    return RankChange(
        keyword_id=kid,
        user_id="u1",
        kind=kind,
        title="t",
        message="m",
        old_position=None,
        new_position=new_position,
    )


def test_keyword_rankings_newest_first_with_limit(store):
    domain_id = store.add_domain("example.com")
    kid = store.add_keyword(domain_id, "pizza")
    other = store.add_keyword(domain_id, "burger")
    for position in (9, 7, None, 3):
        store.create_keyword_ranking(kid, position)
    store.create_keyword_ranking(other, 1)

    history = store.get_keyword_rankings(kid)
    assert [row["position"] for row in history] == [3, None, 7, 9]
    assert {row["keyword_id"] for row in history} == {kid}

    assert [row["position"] for row in store.get_keyword_rankings(kid, limit=2)] == [3, None]
    assert store.get_keyword_rankings("missing") == []


def test_notifications_limit_keeps_newest(store):
    domain_id = store.add_domain("example.com")
    kid = store.add_keyword(domain_id, "pizza", user_id="u1")
    for position in (1, 2, 3):
        store.create_notification(_change(kid, new_position=position))

    rows = store.list_notifications("u1", limit=2)
    assert [row["new_position"] for row in rows] == [2, 3]


def test_mark_notification_read(store):
    domain_id = store.add_domain("example.com")
    kid = store.add_keyword(domain_id, "pizza", user_id="u1")
    first = store.create_notification(_change(kid, new_position=1))
    store.create_notification(_change(kid, kind="position_improved", new_position=2))

    assert store.mark_notification_read(first) is True
    assert store.mark_notification_read(9999) is False

    rows = store.list_notifications("u1")
    assert [row["is_read"] for row in rows] == [1, 0]
    unread = store.list_notifications("u1", unread_only=True)
    assert [row["type"] for row in unread] == ["position_improved"]
