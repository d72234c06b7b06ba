"""SQLite persistence for tracked keywords, ranking history and notifications."""

from __future__ import annotations

import sqlite3
import threading
import time
import uuid
from typing import Any, Dict, List, Optional

from serp_rank.models import RankChange, TrackedKeyword

SCHEMA = """
CREATE TABLE IF NOT EXISTS domains (
  id TEXT PRIMARY KEY,
  user_id TEXT,
  domain TEXT NOT NULL,
  active INTEGER NOT NULL DEFAULT 1,
  created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS keywords (
  id TEXT PRIMARY KEY,
  user_id TEXT,
  domain_id TEXT NOT NULL REFERENCES domains(id) ON DELETE CASCADE,
  keyword TEXT NOT NULL,
  target_location TEXT NOT NULL DEFAULT 'US',
  device_type TEXT NOT NULL DEFAULT 'desktop',
  active INTEGER NOT NULL DEFAULT 1,
  created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS keyword_rankings (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  keyword_id TEXT NOT NULL REFERENCES keywords(id) ON DELETE CASCADE,
  position INTEGER,
  checked_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_keyword_rankings_keyword_checked
  ON keyword_rankings (keyword_id, checked_at);

CREATE TABLE IF NOT EXISTS notifications (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id TEXT,
  keyword_id TEXT REFERENCES keywords(id) ON DELETE CASCADE,
  type TEXT NOT NULL,
  title TEXT NOT NULL,
  message TEXT NOT NULL,
  old_position INTEGER,
  new_position INTEGER,
  is_read INTEGER NOT NULL DEFAULT 0,
  created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS system_settings (
  key TEXT PRIMARY KEY,
  value TEXT,
  updated_at INTEGER NOT NULL
);
"""


def _now() -> int:
    return int(time.time())


def _new_id() -> str:
    return uuid.uuid4().hex


class RankStore:
    """Thin wrapper over one SQLite connection.

    The scheduler writes from a background thread, so the connection is
    shared across threads behind a lock.
    """

    def __init__(self, path: str = ":memory:"):
        self.path = path
        self.conn = sqlite3.connect(path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.conn.executescript(SCHEMA)
        self._lock = threading.Lock()

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "RankStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def add_domain(self, domain: str, user_id: Optional[str] = None, active: bool = True) -> str:
        domain_id = _new_id()
        with self._lock, self.conn:
            self.conn.execute(
                "INSERT INTO domains (id, user_id, domain, active, created_at) VALUES (?, ?, ?, ?, ?)",
                (domain_id, user_id, domain.strip(), int(active), _now()),
            )
        return domain_id

    def add_keyword(
        self,
        domain_id: str,
        keyword: str,
        target_location: str = "US",
        device_type: str = "desktop",
        user_id: Optional[str] = None,
        active: bool = True,
    ) -> str:
        keyword_id = _new_id()
        with self._lock, self.conn:
            self.conn.execute(
                """
                INSERT INTO keywords (
                  id, user_id, domain_id, keyword, target_location, device_type, active, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    keyword_id,
                    user_id,
                    domain_id,
                    keyword.strip(),
                    target_location.upper(),
                    device_type,
                    int(active),
                    _now(),
                ),
            )
        return keyword_id

    def get_active_keywords_with_domain(self) -> List[TrackedKeyword]:
        """Active keywords whose domain is also active, oldest first."""
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT k.id, k.keyword, k.target_location, k.device_type, k.user_id,
                       d.domain
                FROM keywords k
                JOIN domains d ON d.id = k.domain_id
                WHERE k.active = 1 AND d.active = 1
                ORDER BY k.created_at, k.rowid
                """
            ).fetchall()
        return [
            TrackedKeyword(
                id=row["id"],
                keyword=row["keyword"],
                domain=row["domain"],
                target_location=row["target_location"],
                device_type=row["device_type"],
                user_id=row["user_id"],
            )
            for row in rows
        ]

    def get_latest_keyword_ranking(self, keyword_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self.conn.execute(
                """
                SELECT id, keyword_id, position, checked_at
                FROM keyword_rankings
                WHERE keyword_id = ?
                ORDER BY checked_at DESC, id DESC
                LIMIT 1
                """,
                (keyword_id,),
            ).fetchone()
        return dict(row) if row else None

    def get_keyword_rankings(self, keyword_id: str, limit: int = 30) -> List[Dict[str, Any]]:
        """Ranking history for one keyword, newest first."""
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT id, keyword_id, position, checked_at
                FROM keyword_rankings
                WHERE keyword_id = ?
                ORDER BY checked_at DESC, id DESC
                LIMIT ?
                """,
                (keyword_id, limit),
            ).fetchall()
        return [dict(row) for row in rows]

    def create_keyword_ranking(self, keyword_id: str, position: Optional[int]) -> int:
        with self._lock, self.conn:
            cur = self.conn.execute(
                "INSERT INTO keyword_rankings (keyword_id, position, checked_at) VALUES (?, ?, ?)",
                (keyword_id, position, _now()),
            )
        return int(cur.lastrowid)

    def create_notification(self, change: RankChange) -> int:
        with self._lock, self.conn:
            cur = self.conn.execute(
                """
                INSERT INTO notifications (
                  user_id, keyword_id, type, title, message, old_position, new_position, is_read, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?)
                """,
                (
                    change.user_id,
                    change.keyword_id,
                    change.kind,
                    change.title,
                    change.message,
                    change.old_position,
                    change.new_position,
                    _now(),
                ),
            )
        return int(cur.lastrowid)

    def list_notifications(
        self,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
        unread_only: bool = False,
    ) -> List[Dict[str, Any]]:
        """Notifications oldest first; with *limit*, only the newest *limit* of them."""
        clauses = []
        params: list = []
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        if unread_only:
            clauses.append("is_read = 0")

        query = "SELECT * FROM notifications"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with self._lock:
            rows = self.conn.execute(query, params).fetchall()
        return [dict(row) for row in reversed(rows)]

    def mark_notification_read(self, notification_id: int) -> bool:
        """Flag one notification as read; False when no such notification exists."""
        with self._lock, self.conn:
            cur = self.conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE id = ?", (notification_id,)
            )
        return cur.rowcount > 0

    def get_system_setting(self, key: str) -> Optional[str]:
        with self._lock:
            row = self.conn.execute(
                "SELECT value FROM system_settings WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def set_system_setting(self, key: str, value: str) -> None:
        with self._lock, self.conn:
            self.conn.execute(
                """
                INSERT INTO system_settings (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, _now()),
            )
