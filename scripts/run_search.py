#!/usr/bin/env python3
"""
Places Lead Search

Runs a text search, follows "load more" pages and prints the lead-ranked
table. Talks to the Places API directly unless --server points at a running
relay.

Usage:
    python scripts/run_search.py "dentist in Austin, TX"
    python scripts/run_search.py "roofing contractor Denver" --pages 3 --csv output/roofers.csv
    python scripts/run_search.py "hvac San Jose" --server http://localhost:3000

Environment Variables:
    GOOGLE_MAPS_API_KEY: Required without --server.
"""

import os
import sys
import json
import logging
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from places_leads.aggregator import LeadAggregator
from places_leads.config import DEFAULT_PAGE_SIZE, get_max_rows, warn_if_unconfigured
from places_leads.export import export_to_csv, export_to_json
from places_leads.fetch import HttpRelayClient, PlacesTextSearchRelay
from places_leads.render import render_text_table
from places_leads.score import get_scoring_summary

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Search places and rank them by lead score"
    )
    parser.add_argument("query", help="Text query, e.g. 'plumber in Austin, TX'")
    parser.add_argument(
        "--page-size", type=int, default=DEFAULT_PAGE_SIZE,
        help=f"Results per page (default: {DEFAULT_PAGE_SIZE})"
    )
    parser.add_argument(
        "--pages", type=int, default=1,
        help="Pages to fetch, following nextPageToken (default: 1)"
    )
    parser.add_argument(
        "--limit", type=int, default=None,
        help="Rows to show (default: MAX_ROWS_TO_SHOW or 50)"
    )
    parser.add_argument(
        "--server", default=None,
        help="Base URL of a running relay server, e.g. http://localhost:3000"
    )
    parser.add_argument("--json", dest="json_path", help="Write ranked rows to this JSON file")
    parser.add_argument("--csv", dest="csv_path", help="Write ranked rows to this CSV file")
    parser.add_argument(
        "--show-raw", action="store_true",
        help="Print the latest raw API response"
    )
    return parser.parse_args(argv)


def build_relay(server=None):
    if server:
        logger.info(f"Using relay server at {server}")
        return HttpRelayClient(server)
    warn_if_unconfigured()
    return PlacesTextSearchRelay()


def main(argv=None) -> int:
    """Run the search and print results. Returns a process exit code."""
    args = parse_args(argv)

    aggregator = LeadAggregator(
        build_relay(args.server),
        max_rows=args.limit if args.limit is not None else get_max_rows(),
    )

    model = aggregator.search(args.query, args.page_size)
    pages_fetched = 1
    while model.ok and model.has_more and pages_fetched < args.pages:
        model = aggregator.load_more(args.query, args.page_size)
        pages_fetched += 1

    if not model.ok:
        logger.error(model.status)
        if model.error and model.error.details is not None:
            logger.error(f"Details: {model.error.details}")
        if not aggregator.session.places:
            return 1
        # later page failed; show what was accumulated
        model = aggregator.render()

    print()
    print(render_text_table(model))

    if model.rows:
        summary = get_scoring_summary(model.rows)
        logger.info(
            f"Top score: {summary['top_score']}; "
            f"{summary['zero_score']} of {summary['total']} shown scored 0"
        )

    if args.show_raw and model.raw_response is not None:
        print()
        print(json.dumps(model.raw_response, indent=2))

    if args.json_path:
        export_to_json(model, args.json_path, query=args.query, metadata={"pages_fetched": pages_fetched})
    if args.csv_path:
        export_to_csv(model, args.csv_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
