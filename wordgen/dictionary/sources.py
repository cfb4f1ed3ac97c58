"""Dictionary collaborators: word list, Postgres table and an Oxford-style HTTP API.

Every source answers one question for a batch of words: which of them are
words in ``language``, and what their definitions are. The returned mapping
holds valid words only (uppercase) and maps each to a definition or ``None``.
A source that makes one remote call per word stops early once ``cancelled``
is set; the caller has given up on the batch by then.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence
from urllib.parse import quote

import httpx

from wordgen.common.db import get_conn
from wordgen.errors import DictionaryUnavailable

logger = logging.getLogger(__name__)

DEFAULT_WORDS = {
    "AN", "AT", "BE", "DO", "GO", "HE", "IN", "IS", "IT", "ME", "NO", "OF", "ON", "OR", "SO", "TO", "UP", "WE",
    "ACT", "AND", "ANT", "ARE", "ART", "BAT", "BED", "CAT", "DEN", "DOG", "EAT", "END", "NET", "NOT",
    "RAT", "SAT", "SET", "TAN", "TAR", "TEA", "TEN", "TIE", "TIN", "TOE", "TON", "NIT", "SIT", "ITS",
    "DATE", "EAST", "NEST", "NOTE", "RATE", "REST", "SANE", "SEAT", "SENT", "STAR", "TEAR", "TENT",
    "TEST", "TONE", "SETT", "STET", "TETS", "STONE", "TONES", "ONSET", "NOTES", "STARE", "TEARS",
    "WORD", "WORDS", "SWORD", "GAME", "PLAY", "PUZZLE", "LISTEN", "SILENT", "ENLIST", "TINSEL",
}

OXFORD_LANGUAGES = {"en": "en-gb", "es": "es", "fr": "fr", "de": "de"}


class DictionarySource(Protocol):
    def lookup(
        self, words: Sequence[str], language: str, cancelled: threading.Event | None = None
    ) -> dict[str, str | None]: ...


class WordListDictionary:
    def __init__(
        self,
        words: Mapping[str, set[str]] | set[str] | None = None,
        *,
        definitions: Mapping[str, str] | None = None,
        language: str = "en",
    ) -> None:
        if words is None:
            words = {language: DEFAULT_WORDS}
        elif not isinstance(words, Mapping):
            words = {language: words}
        self._words: dict[str, set[str]] = {
            lang.lower(): {w.strip().upper() for w in entries if w.strip()} for lang, entries in words.items()
        }
        self._definitions = {k.upper(): v for k, v in (definitions or {}).items()}

    @classmethod
    def from_file(cls, path: str | Path, language: str = "en") -> WordListDictionary:
        """Load a one-word-per-line file; blank lines and non-alphabetic entries are skipped."""
        words: set[str] = set()
        with Path(path).open("rb") as handle:
            for raw_line in handle:
                candidate = raw_line.decode("utf-8", errors="ignore").strip()
                if candidate.isalpha() and len(candidate) >= 2:
                    words.add(candidate.upper())
        logger.info("loaded wordlist path=%s language=%s words=%s", path, language, len(words))
        return cls({language: words})

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._words.values())

    def lookup(
        self, words: Sequence[str], language: str, cancelled: threading.Event | None = None
    ) -> dict[str, str | None]:
        known = self._words.get(language.lower(), set())
        found: dict[str, str | None] = {}
        for word in words:
            key = word.upper()
            if key in known:
                found[key] = self._definitions.get(key)
        return found


class PostgresDictionary:
    LOOKUP_SQL = """
SELECT word, definition
FROM dictionary_words
WHERE language = %s
  AND word = ANY(%s)
"""

    def lookup(
        self, words: Sequence[str], language: str, cancelled: threading.Event | None = None
    ) -> dict[str, str | None]:
        if not words:
            return {}
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(self.LOOKUP_SQL, (language.lower(), [w.upper() for w in words]))
                rows = cur.fetchall()
        return {row[0]: row[1] for row in rows}


def _first_definition(payload: Any) -> str | None:
    try:
        for result in payload.get("results", []):
            for lexical in result.get("lexicalEntries", []):
                for entry in lexical.get("entries", []):
                    for sense in entry.get("senses", []):
                        for definition in sense.get("definitions", []):
                            if definition:
                                return str(definition)
    except AttributeError:
        return None
    return None


class HttpDictionary:
    """Oxford-style entries API: ``GET {base}/entries/{lang}/{word}``; 404 means not a word."""

    def __init__(
        self,
        base_url: str,
        *,
        app_id: str = "",
        app_key: str = "",
        timeout_s: float = 3.0,
        client: httpx.Client | None = None,
    ) -> None:
        headers = {"Accept": "application/json", "User-Agent": "wordgen-dictionary/1.0"}
        if app_id:
            headers["app_id"] = app_id
        if app_key:
            headers["app_key"] = app_key
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout_s),
        )

    def close(self) -> None:
        self._client.close()

    def lookup(
        self, words: Sequence[str], language: str, cancelled: threading.Event | None = None
    ) -> dict[str, str | None]:
        lang = OXFORD_LANGUAGES.get(language.lower(), language.lower())
        found: dict[str, str | None] = {}
        for index, word in enumerate(words):
            if cancelled is not None and cancelled.is_set():
                logger.debug("dictionary lookup abandoned remaining=%s", len(words) - index)
                break
            try:
                response = self._client.get(f"/entries/{lang}/{quote(word.lower())}")
            except httpx.HTTPError as exc:
                raise DictionaryUnavailable(f"dictionary request failed: {exc}") from exc

            if response.status_code == 404:
                continue
            if response.status_code >= 400:
                raise DictionaryUnavailable(f"dictionary responded status={response.status_code}")

            try:
                payload = response.json()
            except ValueError:
                payload = {}
            found[word.upper()] = _first_definition(payload)
        return found
