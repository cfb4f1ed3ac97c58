import threading
from pathlib import Path

import httpx
import pytest

from wordgen.dictionary.sources import HttpDictionary, PostgresDictionary, WordListDictionary
from wordgen.errors import DictionaryUnavailable


class _FakeCursor:
    def __init__(self, rows) -> None:
        self._rows = rows
        self.executed: list[tuple[str, tuple]] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None

    def execute(self, sql, params):
        self.executed.append((sql, params))

    def fetchall(self):
        return self._rows


class _FakeConn:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None

    def cursor(self):
        return self._cursor


def test_wordlist_lookup_is_case_insensitive_and_per_language() -> None:
    source = WordListDictionary({"en": {"listen", "silent"}, "es": {"sol"}}, definitions={"listen": "to hear"})

    assert source.lookup(["Listen", "tinsel", "sol"], "en") == {"LISTEN": "to hear"}
    assert source.lookup(["SOL"], "ES") == {"SOL": None}
    assert source.lookup(["LISTEN"], "de") == {}


def test_wordlist_from_file_skips_non_words(tmp_path: Path) -> None:
    path = tmp_path / "words.txt"
    path.write_text("stone\n\nnotes\nx\nabc123\nOnset\n")

    source = WordListDictionary.from_file(path)

    assert len(source) == 3
    assert set(source.lookup(["STONE", "NOTES", "ONSET", "ABC123"], "en")) == {"STONE", "NOTES", "ONSET"}


def test_postgres_dictionary_queries_uppercase_words(monkeypatch) -> None:
    cur = _FakeCursor([("LISTEN", "to hear"), ("SILENT", None)])
    monkeypatch.setattr("wordgen.dictionary.sources.get_conn", lambda: _FakeConn(cur))

    found = PostgresDictionary().lookup(["listen", "silent", "tsilen"], "EN")

    assert found == {"LISTEN": "to hear", "SILENT": None}
    sql, params = cur.executed[0]
    assert "FROM dictionary_words" in sql
    assert params == ("en", ["LISTEN", "SILENT", "TSILEN"])


def _oxford_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/entries/en-gb/listen"):
        return httpx.Response(
            200,
            json={
                "results": [
                    {"lexicalEntries": [{"entries": [{"senses": [{"definitions": ["give attention to sound"]}]}]}]}
                ]
            },
        )
    if request.url.path.endswith("/entries/en-gb/broken"):
        return httpx.Response(503)
    return httpx.Response(404)


def test_http_dictionary_maps_404_to_unknown_and_reads_definitions() -> None:
    client = httpx.Client(base_url="https://dictionary.test/api/v2", transport=httpx.MockTransport(_oxford_handler))
    source = HttpDictionary("https://dictionary.test/api/v2", client=client)

    found = source.lookup(["LISTEN", "TSILEN"], "en")

    assert found == {"LISTEN": "give attention to sound"}


def test_http_dictionary_raises_on_server_errors() -> None:
    client = httpx.Client(base_url="https://dictionary.test/api/v2", transport=httpx.MockTransport(_oxford_handler))
    source = HttpDictionary("https://dictionary.test/api/v2", client=client)

    with pytest.raises(DictionaryUnavailable):
        source.lookup(["LISTEN", "BROKEN"], "en")


def test_http_dictionary_wraps_transport_errors() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(base_url="https://dictionary.test", transport=httpx.MockTransport(_refuse))

    with pytest.raises(DictionaryUnavailable):
        HttpDictionary("https://dictionary.test", client=client).lookup(["LISTEN"], "en")


def test_http_dictionary_stops_once_cancelled() -> None:
    cancelled = threading.Event()
    requested: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        if len(requested) == 2:
            cancelled.set()
        return httpx.Response(404)

    client = httpx.Client(base_url="https://dictionary.test", transport=httpx.MockTransport(_handler))
    source = HttpDictionary("https://dictionary.test", client=client)

    found = source.lookup(["STONE", "NOTES", "TONES", "ONSET"], "en", cancelled=cancelled)

    assert found == {}
    assert len(requested) == 2
