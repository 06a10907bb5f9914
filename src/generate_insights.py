"""
Health Journal Insights: command-line runner
============================================
Runs the insight engine for one user against the configured repository
(INSIGHT_STORAGE_BACKEND) and prints the result as JSON.

Usage:
    python generate_insights.py --user-id U              # Generate + store insights
    python generate_insights.py --user-id U --list       # Show active insights
    python generate_insights.py --bootstrap              # Create Postgres tables

Needs INSIGHT_STORAGE_BACKEND=postgres: the memory backend starts empty in
every process, so the runner refuses it with exit code 3.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from config import load_settings
from errors import InsufficientDataError, StorageError
from insight_engine import InsightEngine
from storage import PostgresRepository, get_repository

log = logging.getLogger("generate_insights")

EXIT_OK = 0
EXIT_STORAGE_FAILURE = 1
EXIT_INSUFFICIENT_DATA = 2
EXIT_USAGE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate health journal insights")
    parser.add_argument("--user-id", help="User whose history is analysed")
    parser.add_argument("--list", action="store_true", help="List active insights instead of generating")
    parser.add_argument("--bootstrap", action="store_true", help="Create database tables first (postgres only)")
    return parser


def main(argv: Optional[List[str]] = None, repository=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if repository is None and settings.storage_backend == "memory":
        log.error("INSIGHT_STORAGE_BACKEND=memory holds no journal data; use postgres")
        return EXIT_USAGE

    repo = repository if repository is not None else get_repository(settings)

    try:
        if args.bootstrap:
            if not isinstance(repo, PostgresRepository):
                log.error("--bootstrap needs INSIGHT_STORAGE_BACKEND=postgres")
                return EXIT_USAGE
            repo.bootstrap_schema()
            if not args.user_id:
                return EXIT_OK

        if not args.user_id:
            log.error("--user-id is required")
            return EXIT_USAGE

        if args.list:
            insights = repo.get_insights(args.user_id)
            payload = {"insights": [i.model_dump(mode="json") for i in insights]}
        else:
            engine = InsightEngine(
                repo,
                correlation_threshold=settings.correlation_threshold,
                min_entries=settings.min_entries,
            )
            payload = engine.generate_insights(args.user_id).model_dump(mode="json")

    except InsufficientDataError as e:
        log.warning("%s. Add %d more entries and try again.", e, e.missing)
        return EXIT_INSUFFICIENT_DATA
    except StorageError as e:
        log.error("Storage failure: %s", e)
        return EXIT_STORAGE_FAILURE

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
