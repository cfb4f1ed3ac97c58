import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Iterable

import httpx

from wordgen.common.db import get_conn_async

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 15
MIN_WORD_LENGTH = 2
MAX_WORD_LENGTH = int(os.environ.get("WORDGEN_MAX_CHARACTERS", "15"))


@dataclass(frozen=True)
class WordSource:
    name: str
    location: str
    language: str = "en"
    limit: int = 500000


DEFAULT_SOURCES = (
    WordSource(
        name="dwyl-words-alpha",
        location="https://raw.githubusercontent.com/dwyl/english-words/master/words_alpha.txt",
        language="en",
    ),
)


def parse_entry(line: str) -> tuple[str, str | None] | None:
    """Parse ``word`` or ``word<TAB>definition``; returns None for unusable lines."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    word, _, definition = line.partition("\t")
    word = word.strip().upper()
    if not word.isalpha() or not word.isascii():
        return None
    if not MIN_WORD_LENGTH <= len(word) <= MAX_WORD_LENGTH:
        return None
    return word, (definition.strip() or None)


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


async def _fetch_lines(client: httpx.AsyncClient, source: WordSource) -> AsyncIterator[str]:
    if not _is_url(source.location):
        with Path(source.location).open("rb") as handle:
            for raw_line in handle:
                yield raw_line.decode("utf-8", errors="ignore")
        return

    async with client.stream("GET", source.location) as resp:
        resp.raise_for_status()
        async for line in resp.aiter_lines():
            yield line


async def collect_words(
    sources: Iterable[WordSource],
    client: httpx.AsyncClient | None = None,
) -> dict[tuple[str, str], str | None]:
    rows: dict[tuple[str, str], str | None] = {}
    owns_client = client is None
    client = client or httpx.AsyncClient(
        timeout=REQUEST_TIMEOUT_S,
        headers={"User-Agent": "wordgen-dictionary-loader/1.0"},
        follow_redirects=True,
    )

    try:
        for source in sources:
            loaded = 0
            try:
                async for line in _fetch_lines(client, source):
                    if loaded >= source.limit:
                        break
                    parsed = parse_entry(line)
                    if parsed is None:
                        continue
                    word, definition = parsed
                    key = (word, source.language.lower())
                    if key in rows:
                        if definition:
                            rows[key] = definition
                        continue
                    rows[key] = definition
                    loaded += 1
                logger.info("loaded %s words from %s", loaded, source.name)
            except (httpx.HTTPError, OSError):
                logger.exception("failed to load words from %s", source.location)
    finally:
        if owns_client:
            await client.aclose()

    return rows


async def store_words(rows: dict[tuple[str, str], str | None]) -> int:
    if not rows:
        logger.warning("dictionary load skipped: no words collected")
        return 0

    async with get_conn_async() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                CREATE TEMP TABLE tmp_dictionary_words (
                    word TEXT NOT NULL,
                    language TEXT NOT NULL,
                    definition TEXT,
                    PRIMARY KEY (word, language)
                ) ON COMMIT DROP
                """
            )

            async with cur.copy("COPY tmp_dictionary_words(word, language, definition) FROM STDIN") as copy:
                for (word, language), definition in sorted(rows.items()):
                    await copy.write_row((word, language, definition))

            await cur.execute(
                """
                INSERT INTO dictionary_words(word, language, definition)
                SELECT word, language, definition
                FROM tmp_dictionary_words
                ON CONFLICT (word, language) DO UPDATE
                SET definition = COALESCE(EXCLUDED.definition, dictionary_words.definition)
                WHERE dictionary_words.definition IS DISTINCT FROM
                      COALESCE(EXCLUDED.definition, dictionary_words.definition)
                """
            )
            changed_rows = cur.rowcount

    logger.info("synced dictionary words: source_words=%s changed_rows=%s", len(rows), changed_rows)
    return changed_rows


async def run(sources: Iterable[WordSource] = DEFAULT_SOURCES) -> int:
    rows = await collect_words(sources)
    return await store_words(rows)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())
