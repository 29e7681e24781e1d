#!/usr/bin/env python
"""
Run one search against the index and print the results.

Usage:
  python -m scripts.search "query words" [--site https://example.com] [--offset 0] [--limit 20]
"""

import argparse
import logging
import os
import sys

# Ensure project root is on path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from apps.api.services.errors import SearchError
from apps.api.services.morphology import LemmaExtractor
from apps.api.services.search import ProximityPolicy, SearchEngine

logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="Search the lemma index")
    parser.add_argument("query", help="Search query")
    parser.add_argument("--site", default=None, help="Site root URL to search in")
    parser.add_argument("--offset", type=int, default=0)
    parser.add_argument("--limit", type=int, default=20)
    parser.add_argument("--no-proximity", action="store_true", help="Disable the query-word proximity filter")
    args = parser.parse_args()

    proximity = ProximityPolicy.OFF if args.no_proximity else ProximityPolicy.ON
    engine = SearchEngine(LemmaExtractor(), proximity=proximity)
    try:
        page = engine.search(args.query, site=args.site, offset=args.offset, limit=args.limit)
    except SearchError as e:
        logger.error("%s", e)
        sys.exit(1)

    print(f"{page.count} results")
    for r in page.results:
        print(f"{r.relevance:.4f}  {r.site}{r.uri}  {r.title}")
        print(f"        {r.snippet}")


if __name__ == "__main__":
    main()
