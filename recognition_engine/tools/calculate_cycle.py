"""
Calculate and publish the results of one recognition cycle from the command line.

Usage:
    python -m recognition_engine.tools.calculate_cycle <cycle_id> [--db-url URL] [--workers N]

Prints the outcome as JSON. Exit code 0 on full success, 1 on any failure.
"""

from __future__ import annotations

import argparse
import json
import os
import sys

from recognition_engine.config import reset_settings_cache
from recognition_engine.core.exceptions import RecognitionEngineError
from recognition_engine.database import init_db
from recognition_engine.recognition_logging import get_logger
from recognition_engine.results_worker import RunnerConfig, calculate_cycle_results

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calculate weighted rankings and fairness reports for a cycle.")
    parser.add_argument("cycle_id", help="Award cycle id")
    parser.add_argument("--db-url", default=None, help="SQLAlchemy database URL (default: from env)")
    parser.add_argument("--workers", type=int, default=None, help="Max themes computed in parallel")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.db_url:
        os.environ["RECOGNITION_DB_URL"] = args.db_url
        reset_settings_cache()
    init_db()

    config = RunnerConfig.from_settings()
    if args.workers is not None:
        config = RunnerConfig(
            max_workers=args.workers,
            lock_ttl_sec=config.lock_ttl_sec,
            default_clique_threshold=config.default_clique_threshold,
        )
    try:
        result = calculate_cycle_results(args.cycle_id, config)
    except RecognitionEngineError as e:
        logger.error("calculate_cycle_cli_failed", cycle_id=args.cycle_id, code=e.code, error=e.message)
        print(json.dumps(e.to_dict()))
        return 1
    print(json.dumps(result.to_dict(), indent=2))
    logger.info("calculate_cycle_cli_done", cycle_id=args.cycle_id, success=result.success)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
