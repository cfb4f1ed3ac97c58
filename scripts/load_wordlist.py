#!/usr/bin/env python3
import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wordgen.batch.dictionary_loader import WordSource, collect_words, store_words


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Load a word list (file path or URL, one word per line) into dictionary_words."
    )
    parser.add_argument("location", help="Path or http(s) URL of the word list")
    parser.add_argument("--language", default="en", help="Language code of the list")
    parser.add_argument("--limit", type=int, default=500000, help="Maximum words to load")
    parser.add_argument("--dry-run", action="store_true", help="Parse only; do not write to Postgres")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    source = WordSource(name=Path(args.location).name, location=args.location, language=args.language, limit=args.limit)
    rows = asyncio.run(collect_words([source]))
    if args.dry_run:
        print(f"Parsed {len(rows)} words from {args.location}")
        return

    changed = asyncio.run(store_words(rows))
    print(f"Loaded {len(rows)} words ({changed} rows changed)")


if __name__ == "__main__":
    main()
