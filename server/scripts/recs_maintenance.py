#!/usr/bin/env python3
"""
Run recommendation store maintenance: decay, cap-top-K, snapshot retention,
prune weak edges, compact.

Intended for a weekly cron job. Reads RECS_ENABLED / RECS_DB_PATH / RECS_CONFIG_PATH
from the environment (or .env) like the server; command-line flags override them.

Usage:
  From repo root:
    python -m server.scripts.recs_maintenance

  Optional:
    --db-path data/recs.db
    --decay-factor 0.98 --older-than-days 7
    --max-edges 200 --min-weight 0.01
    --retention-days 90
    --skip-compact
    --stats-only
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from playlist_recs import RecsEngine

from server.config import get_config

logger = logging.getLogger("recs_maintenance")


def main() -> int:
    parser = argparse.ArgumentParser(description="Recommendation store maintenance")
    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help="SQLite file to maintain (default: RECS_DB_PATH)",
    )
    parser.add_argument("--decay-factor", type=float, default=None, help="Multiplier for stale edges")
    parser.add_argument("--older-than-days", type=float, default=None, help="Decay edges not seen for this many days")
    parser.add_argument("--max-edges", type=int, default=None, help="Edges kept per track")
    parser.add_argument("--min-weight", type=float, default=None, help="Prune edges below this weight")
    parser.add_argument("--retention-days", type=float, default=None, help="Delete collection snapshots older than this")
    parser.add_argument("--skip-compact", action="store_true", help="Do not VACUUM afterwards")
    parser.add_argument("--stats-only", action="store_true", help="Print stats and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = get_config()
    if args.db_path is None and not config.recs_enabled:
        logger.info("[maintenance] Recommendations not enabled, nothing to do")
        return 0

    recs_config = config.load_recs_config()
    overrides = {
        "decay_factor": args.decay_factor,
        "decay_older_than_days": args.older_than_days,
        "max_edges_per_track": args.max_edges,
        "prune_min_weight": args.min_weight,
        "snapshot_retention_days": args.retention_days,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        recs_config = recs_config.model_copy(update=overrides)

    db_path = args.db_path or config.recs_db_path
    engine = RecsEngine.open(enabled=True, db_path=db_path, config=recs_config)
    try:
        if args.stats_only:
            print(json.dumps(engine.get_stats().model_dump(), indent=2))
            return 0
        report = engine.run_maintenance(include_compact=not args.skip_compact)
        print(json.dumps(report.model_dump(), indent=2))
    except Exception as e:
        logger.exception("[maintenance] Failed: %s", e)
        return 1
    finally:
        engine.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
