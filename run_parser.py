#!/usr/bin/env python3
"""
Command-line script to convert story exports into JSON documents.

Reads saved HTML exports (or downloads them by document id), parses them
and writes ``<slug>.json`` into the output directory the builder reads.

Usage:
    python run_parser.py export.html
    python run_parser.py exports/*.html --output-dir static/data
    python run_parser.py 1BxiMVs0XRA5nFMdKvBdBZjgmUUqptlbs74OgvE2upms --doc-id
    python run_parser.py export.html --stdout
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Load .env file automatically
from dotenv import load_dotenv
load_dotenv()

from story_parser.main import StoryParser
from story_parser.fetcher import fetch_export
from story_parser.exceptions import FetchError
from story_parser.field_tables import VIDEO_SCROLL_TYPES
from story_parser.logger import setup_logger


def summarize(document, warnings: list[str]) -> None:
    """Per-document report on stderr."""
    print(f"  Title: {document.title or 'not found'}", file=sys.stderr)
    print(f"  Slug: {document.slug}", file=sys.stderr)
    print(f"  Intro: {'OK' if document.intro else 'empty'}", file=sys.stderr)
    print(f"  Paragraphs: {len(document.paragraphs)}", file=sys.stderr)
    print(f"  Credits: {'OK' if document.credits else 'empty'}", file=sys.stderr)

    video_scrolls = [p for p in document.paragraphs if p.type in VIDEO_SCROLL_TYPES]
    for index, block in enumerate(video_scrolls, start=1):
        steps = getattr(block, 'steps', None) or []
        print(
            f"  Video scroll {index}: video={'yes' if getattr(block, 'video_src', None) else 'no'} "
            f"frames={getattr(block, 'frame_start', None) or 1}-{getattr(block, 'frame_stop', None) or 'n/a'} "
            f"steps={len(steps)}",
            file=sys.stderr
        )

    if warnings:
        print(f"  Warnings: {len(warnings)}", file=sys.stderr)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Convert word-processor story exports into JSON documents"
    )
    parser.add_argument(
        "sources",
        nargs="+",
        help="HTML export files (or document ids with --doc-id)"
    )
    parser.add_argument(
        "--doc-id",
        action="store_true",
        help="Treat sources as document ids and download their exports"
    )
    parser.add_argument(
        "--output-dir", "-o",
        default=os.getenv("STORY_OUTPUT_DIR", "static/data"),
        help="Directory for <slug>.json files (default: $STORY_OUTPUT_DIR or static/data)"
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the JSON instead of writing files"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logger(level=log_level)

    story_parser = StoryParser()
    failures = 0

    for source in args.sources:
        print(f"Parsing: {source}", file=sys.stderr)

        try:
            if args.doc_id:
                result = story_parser.parse(fetch_export(source))
            else:
                result = story_parser.parse_file(Path(source))

            document = result.document
            if args.stdout:
                print(document.to_json())
            else:
                output_file = story_parser.save(document, args.output_dir)
                print(f"  ✓ Saved: {output_file}", file=sys.stderr)

            summarize(document, result.warnings)

        except FetchError as e:
            failures += 1
            print(f"  ✗ Error: {e.message}", file=sys.stderr)

        except OSError as e:
            failures += 1
            print(f"  ✗ Error: {e}", file=sys.stderr)

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
