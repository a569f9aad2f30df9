#!/usr/bin/env python3
"""
Cover Lookup Tool

Finds a cover image for a book by title and author, trying several catalogs
and scrapers in order, and stores it in the local covers directory.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List

from coverlookup.models.cover import CoverRequest
from coverlookup.services.batch_processor import stored_count
from coverlookup.services.cover_lookup import CoverLookupService
from coverlookup.shared.config import config_manager

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def load_batch_file(path: str) -> List[CoverRequest]:
    """Read a JSON list of {"title": ..., "authors": [...]} objects."""
    with open(path, 'r', encoding='utf-8') as f:
        entries = json.load(f)

    if not isinstance(entries, list):
        raise ValueError("Batch file must contain a JSON list")

    requests = []
    for i, entry in enumerate(entries, 1):
        if not isinstance(entry, dict) or not entry.get('title'):
            raise ValueError(f"Entry {i} has no title")
        authors = entry.get('authors') or []
        if isinstance(authors, str):
            authors = [authors]
        requests.append(CoverRequest.create(entry['title'], authors))
    return requests


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Find and store book cover images')
    parser.add_argument('title', nargs='?', help='Title of the book')
    parser.add_argument('-a', '--author', action='append', default=[],
                        help='Author name (can be specified multiple times)')
    parser.add_argument('-b', '--batch', metavar='FILE',
                        help='JSON file with a list of {"title", "authors"} objects')
    parser.add_argument('-s', '--search-only', action='store_true',
                        help='Only look up the cover URL, do not download it')
    parser.add_argument('--covers-dir', type=Path,
                        help='Directory to store covers in (default: ./data/covers)')
    parser.add_argument('--no-scrape', action='store_true',
                        help='Skip the Goodreads and image search fallbacks')
    parser.add_argument('--init-config', action='store_true',
                        help='Create an example config file and exit')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')
    return parser


async def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    if args.init_config:
        if config_manager.create_example_config():
            print(f"Created example config: {config_manager.config_path}")
        else:
            print(f"Config already exists: {config_manager.config_path}")
        return 0

    if not args.title and not args.batch:
        print("Error: Provide a title or --batch FILE")
        return 1

    if args.title and args.batch:
        print("Error: Cannot use both a title and --batch together")
        return 1

    try:
        settings = config_manager.load_settings(
            covers_dir=args.covers_dir,
            scrape_enabled=False if args.no_scrape else None,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    service = CoverLookupService(settings=settings)

    if args.batch:
        try:
            requests = load_batch_file(args.batch)
        except (OSError, ValueError) as e:
            print(f"Error: Could not read batch file: {e}")
            return 1

        results = await service.process_all(requests)
        print(json.dumps({
            'results': [result.to_dict() for result in results],
            'stored': stored_count(results),
            'total': len(results),
        }, indent=2))
        return 0

    if args.search_only:
        result = await service.search_cover(args.title, args.author)
    else:
        result = await service.resolve_and_store(args.title, args.author)

    print(json.dumps(result.to_dict(), indent=2))
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
