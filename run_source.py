#!/usr/bin/env python3
"""
CLI script to query a reading source.

Usage:
    python run_source.py --list
    python run_source.py readnovelfull search "martial peak"
    python run_source.py readnovelfull details martial-peak
    python run_source.py readnovelfull content martial-peak/chapter-1
    python run_source.py mangapill details /manga/2/one-piece -o one-piece.json

Settings come from READING_SOURCES_* environment variables (a .env file is
loaded automatically); see reading_sources/config.py.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Load .env file automatically
from dotenv import load_dotenv
load_dotenv()

from reading_sources.config import load_settings
from reading_sources.content_cache import ContentCache
from reading_sources.exceptions import ReadingSourceError
from reading_sources.logger import setup_logger
from reading_sources.sources import available_sources, open_source
from reading_sources.transport import HttpxTransport


async def run(args, settings) -> object:
    cache = ContentCache(settings.cache_dir) if settings.cache_dir else None

    async with HttpxTransport(user_agent=settings.user_agent, timeout=settings.timeout) as transport:
        source = open_source(args.source, transport, cache=cache)

        if args.command == "search":
            results = await source.search(args.target)
            return [r.model_dump() for r in results]
        if args.command == "details":
            return (await source.get_details(args.target)).model_dump()
        return (await source.get_content(args.target, parent=args.book)).model_dump()


def main():
    parser = argparse.ArgumentParser(description="Search and read from a reading source")
    parser.add_argument("source", nargs="?", help="Source id (see --list)")
    parser.add_argument("command", nargs="?", choices=["search", "details", "content"])
    parser.add_argument("target", nargs="?", help="Search query, book id or chapter id")
    parser.add_argument("--book", "-b", help="Parent book id (content only)")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--list", "-l", action="store_true", help="List available sources")
    parser.add_argument("--log-level", help="Override READING_SOURCES_LOG_LEVEL")
    args = parser.parse_args()

    settings = load_settings()
    setup_logger(level=args.log_level or settings.log_level)

    if args.list:
        for info in available_sources():
            print(f"{info.id:15} {info.name} {info.version}  {info.base_url}")
        return

    if not (args.source and args.command and args.target):
        parser.error("source, command and target are required")

    try:
        result = asyncio.run(run(args, settings))
    except ValueError as e:
        # Unknown source id
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(2)
    except ReadingSourceError as e:
        print(f"✗ {type(e).__name__}: {e.message}", file=sys.stderr)
        sys.exit(1)

    # ensure_ascii=False preserves unicode characters in the JSON
    output = json.dumps(result, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Saved to: {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()
