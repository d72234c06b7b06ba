"""Periodic ranking checks for every active keyword."""

from __future__ import annotations

import sqlite3
import threading
import time
from typing import Callable, Dict, List, Optional

from serp_rank.exceptions import SerpRankError
from serp_rank.logging_setup import get_logger
from serp_rank.models import RankingResult, TrackedKeyword
from serp_rank.rank_changes import classify_rank_change

logger = get_logger("scheduler")


class RankingScheduler:
    """Check all active keywords in batches and record what changed.

    One check runs at a time: a call made while another is in progress
    returns immediately with ``skipped`` set.
    """

    def __init__(
        self,
        service,
        store,
        batch_size: int = 10,
        batch_delay: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.service = service
        self.store = store
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep
        self._check_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _save(self, keyword: TrackedKeyword, result: RankingResult) -> None:
        previous = self.store.get_latest_keyword_ranking(result.keyword_id)
        previous_position = previous["position"] if previous else None

        self.store.create_keyword_ranking(result.keyword_id, result.position)

        change = classify_rank_change(keyword, previous_position, result.position)
        if change is not None:
            self.store.create_notification(change)

        if result.found:
            logger.info("Saved ranking for keyword %s: position %s", result.keyword_id, result.position)
        else:
            logger.info("Saved ranking for keyword %s: not found in top results", result.keyword_id)

    def _run_batch(self, batch: List[TrackedKeyword]) -> int:
        by_id = {k.id: k for k in batch}
        saved = 0
        for result in self.service.check_multiple_keyword_rankings(batch):
            keyword = by_id.get(result.keyword_id)
            if keyword is None:
                continue
            self._save(keyword, result)
            saved += 1
        return saved

    def check_all_active_keywords(self) -> Dict[str, int]:
        summary = {"checked": 0, "saved": 0, "failed_batches": 0, "skipped": False}

        if not self._check_lock.acquire(blocking=False):
            logger.info("Ranking check already in progress, skipping")
            summary["skipped"] = True
            return summary

        try:
            try:
                keywords = self.store.get_active_keywords_with_domain()
            except sqlite3.Error as exc:
                logger.error("Could not load active keywords: %s", exc)
                return summary

            if not keywords:
                logger.info("No active keywords to check")
                return summary

            logger.info("Checking rankings for %d keywords", len(keywords))
            for start in range(0, len(keywords), self.batch_size):
                batch = keywords[start:start + self.batch_size]
                batch_no = start // self.batch_size + 1
                summary["checked"] += len(batch)
                try:
                    summary["saved"] += self._run_batch(batch)
                except (SerpRankError, sqlite3.Error) as exc:
                    summary["failed_batches"] += 1
                    logger.error("Error checking batch %d: %s", batch_no, exc)

                if start + self.batch_size < len(keywords) and self.batch_delay > 0:
                    self._sleep(self.batch_delay)

            logger.info("Finished ranking check: %s", summary)
            return summary
        finally:
            self._check_lock.release()

    def _run_guarded(self) -> None:
        try:
            self.check_all_active_keywords()
        except Exception:
            # A bad pass must not end the interval loop.
            logger.exception("Scheduled ranking check failed")

    def _loop(self, interval_seconds: float) -> None:
        self._run_guarded()
        while not self._stop.wait(interval_seconds):
            self._run_guarded()

    def start(self, interval_hours: float = 6) -> None:
        """Run a check now, then every *interval_hours* on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.info("Ranking scheduler is already running")
            return

        logger.info("Starting ranking scheduler (checking every %s hours)", interval_hours)
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            args=(interval_hours * 3600,),
            name="ranking-scheduler",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Ask the loop to exit and join it; True once the thread has ended.

        When *timeout* expires mid-check the thread is kept, so ``status()``
        still reports it and ``start()`` will not launch a second loop.
        """
        if self._thread is None:
            return True
        self._stop.set()
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Ranking scheduler still finishing a check after %ss", timeout)
            return False
        self._thread = None
        logger.info("Ranking scheduler stopped")
        return True

    def wait(self) -> None:
        """Block until the scheduler thread exits."""
        if self._thread is not None:
            self._thread.join()

    def status(self) -> Dict[str, bool]:
        return {
            "is_running": self._thread is not None and self._thread.is_alive(),
            "is_checking": self._check_lock.locked(),
        }
