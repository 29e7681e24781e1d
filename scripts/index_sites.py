#!/usr/bin/env python
"""
Run a full crawl + index of the configured sites in the foreground, then print statistics.

Usage:
  python -m scripts.index_sites [--sites config/sites.json] [--ensure-tables]

  Or from project root:
  python scripts/index_sites.py

Requires DATABASE_URL (defaults to a local SQLite file).
"""

import argparse
import json
import logging
import os
import sys

# Ensure project root is on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from apps.api.db import ensure_tables
from apps.api.services.indexing import IndexingPipeline
from apps.api.services.indexing_control import IndexingController
from apps.api.services.morphology import LemmaExtractor
from apps.api.services.sites_config import load_sites
from apps.api.services.statistics import get_statistics

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Crawl and index the configured sites")
    parser.add_argument("--sites", default=None, help="Path to sites JSON (default: config/sites.json)")
    parser.add_argument("--ensure-tables", action="store_true", help="Run ensure_tables() before indexing")
    args = parser.parse_args()

    if args.ensure_tables:
        ensure_tables()

    sites = load_sites(args.sites)
    if not sites:
        logger.error("no sites configured")
        sys.exit(1)

    controller = IndexingController(sites, IndexingPipeline(LemmaExtractor()))
    controller.start_full_indexing()
    try:
        controller.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping indexing")
        controller.stop_indexing()
        controller.wait()

    logger.info("index_sites done: state=%s", controller.state.value)
    print(json.dumps(get_statistics(sites, indexing=False), ensure_ascii=False, indent=2, default=str))


if __name__ == "__main__":
    main()
