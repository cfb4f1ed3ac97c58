import threading
import time

import httpx

from wordgen.common.config import settings
from wordgen.dictionary.breaker import BreakerState, CircuitBreaker
from wordgen.dictionary.sources import HttpDictionary, WordListDictionary
from wordgen.dictionary.validator import DictionaryValidator, classification_accuracy


class _FailingSource:
    def __init__(self) -> None:
        self.calls = 0

    def lookup(self, words, language, cancelled=None):
        self.calls += 1
        raise RuntimeError("dictionary exploded")


class _HangingSource:
    def __init__(self) -> None:
        self.release = threading.Event()

    def lookup(self, words, language, cancelled=None):
        self.release.wait(2)
        return {}


class _GatedSource:
    def __init__(self) -> None:
        self.release = threading.Event()
        self.batches: list[list[str]] = []

    def lookup(self, words, language, cancelled=None):
        self.batches.append(list(words))
        self.release.wait(2)
        return {}


class _FailsOnSecondChunkSource:
    def __init__(self) -> None:
        self.calls = 0

    def lookup(self, words, language, cancelled=None):
        self.calls += 1
        if self.calls > 1:
            raise ConnectionError("dictionary dropped the connection")
        return {word: None for word in words}


class _RecordingSource:
    def __init__(self) -> None:
        self.batches: list[list[str]] = []

    def lookup(self, words, language, cancelled=None):
        self.batches.append(list(words))
        return {word: None for word in words if word in {"STONE", "NOTES"}}


def test_validate_batch_marks_known_words_and_copies_definitions() -> None:
    source = WordListDictionary({"en": {"listen"}}, definitions={"listen": "to hear"})
    validator = DictionaryValidator(source)

    batch = validator.validate_batch(["LISTEN", "TSILEN"], "en", complexities={"LISTEN": 8, "TSILEN": 7})

    assert batch.warning is None
    assert [(r.word, r.is_valid, r.complexity, r.definition) for r in batch.results] == [
        ("LISTEN", True, 8, "to hear"),
        ("TSILEN", False, 7, None),
    ]
    validator.close()


def test_source_failure_degrades_to_all_invalid_with_warning() -> None:
    source = _FailingSource()
    breaker = CircuitBreaker(max_failures=5)
    validator = DictionaryValidator(source, breaker=breaker)

    batch = validator.validate_batch(["STONE", "NOTES", "ONSET"], "en")

    assert batch.degraded
    assert batch.warning.code == "DICTIONARY_UNAVAILABLE"
    assert all(r.is_valid is False for r in batch.results)
    assert all(1 <= r.complexity <= 10 for r in batch.results)
    assert source.calls == 1
    validator.close()


def test_slow_source_times_out_and_degrades() -> None:
    source = _HangingSource()
    validator = DictionaryValidator(source, timeout_s=0.05)

    batch = validator.validate_batch(["STONE"], "en")
    source.release.set()

    assert batch.degraded
    assert "timed out" in batch.warning.message
    assert batch.results[0].is_valid is False
    validator.close()


def test_open_circuit_skips_the_source() -> None:
    source = _FailingSource()
    validator = DictionaryValidator(source, breaker=CircuitBreaker(max_failures=1, cooldown_s=60))

    validator.validate_batch(["STONE"], "en")
    batch = validator.validate_batch(["NOTES"], "en")

    assert validator.breaker.state is BreakerState.OPEN
    assert source.calls == 1
    assert batch.degraded
    validator.close()


def test_words_are_looked_up_in_chunks() -> None:
    source = _RecordingSource()
    validator = DictionaryValidator(source, batch_size=2)

    batch = validator.validate_batch(["STONE", "NOTES", "TONES", "ONSET", "SETON"], "en")

    assert [len(chunk) for chunk in source.batches] == [2, 2, 1]
    assert [r.word for r in batch.results if r.is_valid] == ["STONE", "NOTES"]
    validator.close()


def test_empty_batch_does_not_call_the_source() -> None:
    source = _RecordingSource()
    validator = DictionaryValidator(source)

    assert validator.validate_batch([], "en").results == []
    assert source.batches == []
    validator.close()


def test_classification_accuracy_meets_target_on_representative_words() -> None:
    truth = {
        "LISTEN": True, "SILENT": True, "ENLIST": True, "TINSEL": True, "STONE": True,
        "NOTES": True, "ONSET": True, "TONES": True, "STARE": True, "TEARS": True,
        "TEST": True, "SETT": True, "STET": True, "TETS": True, "WORD": True,
        "SWORD": True, "GAME": True, "PLAY": True, "PUZZLE": True, "CAT": True,
        "TSILEN": False, "NLTSIE": False, "ENOTS": False, "XQZT": False, "TTSE": False,
        "ESTT": False, "DROWW": False, "MAGE": False, "YALP": False, "ZZUPLE": False,
    }
    validator = DictionaryValidator(WordListDictionary())

    batch = validator.validate_batch(list(truth), "en")

    assert classification_accuracy(batch.results, truth) >= settings.accuracy_target
    validator.close()


def test_classification_accuracy_counts_missing_words_as_wrong() -> None:
    validator = DictionaryValidator(WordListDictionary())
    batch = validator.validate_batch(["STONE"], "en")

    assert classification_accuracy(batch.results, {"STONE": True, "NOTES": True}) == 0.5
    validator.close()


def test_timed_out_batch_requests_no_further_chunks() -> None:
    source = _GatedSource()
    validator = DictionaryValidator(source, batch_size=2, timeout_s=0.05)

    batch = validator.validate_batch(["STONE", "NOTES", "TONES", "ONSET", "SETON"], "en")
    source.release.set()
    time.sleep(0.2)

    assert batch.degraded
    assert source.batches == [["STONE", "NOTES"]]
    validator.close()


def test_timed_out_http_lookup_stops_issuing_requests() -> None:
    requests: list[str] = []

    def _slow_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        time.sleep(0.01)
        return httpx.Response(404)

    client = httpx.Client(base_url="https://dictionary.test", transport=httpx.MockTransport(_slow_handler))
    source = HttpDictionary("https://dictionary.test", client=client)
    validator = DictionaryValidator(source, timeout_s=0.1)

    batch = validator.validate_batch([f"WORD{i}" for i in range(300)], "en")
    issued = len(requests)
    time.sleep(0.3)

    assert batch.degraded
    assert "timed out" in batch.warning.message
    assert len(requests) <= issued + 1
    assert len(requests) < 300
    validator.close()


def test_failure_in_a_later_chunk_degrades_the_whole_batch() -> None:
    source = _FailsOnSecondChunkSource()
    validator = DictionaryValidator(source, batch_size=2)

    batch = validator.validate_batch(["STONE", "NOTES", "TONES", "ONSET"], "en")

    assert source.calls == 2
    assert batch.degraded
    assert batch.warning.code == "DICTIONARY_UNAVAILABLE"
    assert "dropped the connection" in batch.warning.message
    assert [r.is_valid for r in batch.results] == [False, False, False, False]
    validator.close()
