"""Command line entry point.

Usage:
  python -m serp_rank lookup "pizza" example.com --country US --device mobile
  python -m serp_rank parse ./response.json --domain example.com
  python -m serp_rank check-all --db ./serp_rank.sqlite
  python -m serp_rank serve --db ./serp_rank.sqlite --interval-hours 6
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from serp_rank.adapters import ScrapingRobotAdapter
from serp_rank.config import PROVIDERS, Settings
from serp_rank.exceptions import SerpRankError
from serp_rank.logging_setup import get_logger, set_level
from serp_rank.ranking import RankingService, find_domain_position
from serp_rank.scheduler import RankingScheduler
from serp_rank.store import RankStore

logger = get_logger("cli")

EXIT_PROVIDER_ERROR = 1
EXIT_BAD_INPUT = 2


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_lookup(args: argparse.Namespace, settings: Settings) -> int:
    service = RankingService(settings)
    result = service.instant_lookup(
        args.keyword,
        args.domain,
        location=args.country,
        device=args.device,
        provider=args.provider,
    )
    _print({"ok": True, **result.to_dict()})
    return 0


def _read_envelope(path: str) -> Optional[Dict[str, Any]]:
    try:
        envelope = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        print(f"Error: cannot read {path}: {exc}", file=sys.stderr)
        return None
    if not isinstance(envelope, dict):
        print(f"Error: {path} does not hold a JSON object", file=sys.stderr)
        return None
    return envelope


def cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    envelope = _read_envelope(args.file)
    if envelope is None:
        return EXIT_BAD_INPUT
    serp = ScrapingRobotAdapter(settings.scrapingrobot_module).normalize(
        envelope, query=args.query, country=args.country
    )
    payload = {
        "ok": True,
        "result_count": len(serp.results),
        "total_results": serp.total_results,
    }
    if args.domain:
        position, matched_url = find_domain_position(serp.results, args.domain)
        payload.update(
            {"domain": args.domain, "found": position is not None,
             "position": position, "matched_url": matched_url}
        )
    if args.show_results:
        payload["results"] = [asdict(item) for item in serp.results]
    _print(payload)
    return 0


def cmd_check_all(args: argparse.Namespace, settings: Settings) -> int:
    with RankStore(args.db or settings.db_path) as store:
        scheduler = RankingScheduler(
            RankingService(settings, store=store),
            store,
            batch_size=args.batch_size,
            batch_delay=args.batch_delay,
        )
        summary = scheduler.check_all_active_keywords()
    _print({"ok": True, **summary})
    return 0


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    with RankStore(args.db or settings.db_path) as store:
        scheduler = RankingScheduler(RankingService(settings, store=store), store)
        scheduler.start(args.interval_hours)
        try:
            scheduler.wait()
        except KeyboardInterrupt:
            logger.info("Interrupted, stopping scheduler")
        finally:
            # Wait out an in-flight check before the store is closed.
            scheduler.stop()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="serp-rank", description="Track a domain's Google ranking for keywords.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_lookup = sub.add_parser("lookup", help="Check one keyword for one domain right now.")
    p_lookup.add_argument("keyword")
    p_lookup.add_argument("domain")
    p_lookup.add_argument("--country", default="US", help="ISO country code (default: US).")
    p_lookup.add_argument("--device", choices=("desktop", "mobile"), default="desktop")
    p_lookup.add_argument("--provider", choices=PROVIDERS, default=None)
    p_lookup.set_defaults(func=cmd_lookup)

    p_parse = sub.add_parser("parse", help="Parse a saved ScrapingRobot JSON response.")
    p_parse.add_argument("file", help="Path to the saved response envelope.")
    p_parse.add_argument("--domain", default=None, help="Report this domain's position.")
    p_parse.add_argument("--query", default="", help="Query the response answers.")
    p_parse.add_argument("--country", default="")
    p_parse.add_argument("--show-results", action="store_true", help="Include every parsed result.")
    p_parse.set_defaults(func=cmd_parse)

    p_check = sub.add_parser("check-all", help="Run one ranking pass over all active keywords.")
    p_check.add_argument("--db", default=None, help="SQLite DB path (default: RANK_DB_PATH).")
    p_check.add_argument("--batch-size", type=int, default=10)
    p_check.add_argument("--batch-delay", type=float, default=2.0)
    p_check.set_defaults(func=cmd_check_all)

    p_serve = sub.add_parser("serve", help="Run the ranking scheduler until interrupted.")
    p_serve.add_argument("--db", default=None, help="SQLite DB path (default: RANK_DB_PATH).")
    p_serve.add_argument("--interval-hours", type=float, default=6)
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings.from_env()
    set_level(settings.log_level)
    try:
        return args.func(args, settings)
    except SerpRankError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_PROVIDER_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
