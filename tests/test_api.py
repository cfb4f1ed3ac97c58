from fastapi.testclient import TestClient

from wordgen.api import main
from wordgen.cache.result_cache import ResultCache
from wordgen.cache.stores import MemoryStore
from wordgen.dictionary.sources import WordListDictionary
from wordgen.dictionary.validator import DictionaryValidator
from wordgen.engine.generator import CombinationGenerator
from wordgen.engine.normalizer import InputNormalizer
from wordgen.service.coordinator import GenerationCoordinator


def _client(monkeypatch, *, max_characters: int = 15) -> TestClient:
    coordinator = GenerationCoordinator(
        normalizer=InputNormalizer(max_characters=max_characters),
        generator=CombinationGenerator(max_combinations=5000),
        validator=DictionaryValidator(WordListDictionary()),
        cache=ResultCache(MemoryStore()),
    )
    monkeypatch.setattr(main, "_coordinator", coordinator)
    return TestClient(main.app)


def test_generate_returns_camel_case_payload(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.post("/words/generate", json={"characters": "listen", "minLength": 6, "maxLength": 6})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["cacheInfo"] == {"hit": False, "source": "computed"}
    assert set(body["data"].keys()) >= {"combinations", "totalGenerated", "truncated", "statistics", "processingTimeMs"}
    assert {"word": "LISTEN", "complexity": 8, "isValid": True, "definition": None} in body["data"]["combinations"]
    assert set(body["performanceData"]["resourceUtilization"].keys()) == {"memory", "cpu"}


def test_second_identical_request_is_a_cache_hit(monkeypatch) -> None:
    client = _client(monkeypatch)
    payload = {"characters": "stone", "minLength": 4}

    first = client.post("/words/generate", json=payload).json()
    second = client.post("/words/generate", json=payload).json()

    assert second["cacheInfo"]["hit"] is True
    assert second["data"] == first["data"]


def test_invalid_characters_map_to_400(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.post("/words/generate", json={"characters": "test123!@#"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"
    assert response.json()["success"] is False


def test_malformed_filters_map_to_400(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.post(
        "/words/generate",
        json={"characters": "stone", "filters": {"minComplexity": 0, "maxComplexity": 4}},
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


def test_memory_limit_maps_to_422(monkeypatch) -> None:
    client = _client(monkeypatch, max_characters=26)

    response = client.post("/words/generate", json={"characters": "abcdefghijklmnopqrstuvwxyz"})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "MEMORY_LIMIT_EXCEEDED"


def test_dictionary_validate_endpoint(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.get("/dictionary/validate", params={"word": "tinsel"})

    assert response.status_code == 200
    assert response.json()["result"]["isValid"] is True
    assert response.json()["warning"] is None


def test_dictionary_validate_rejects_unsupported_language(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.get("/dictionary/validate", params={"word": "tinsel", "language": "xx"})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_INPUT"


def test_health_reports_circuit_state(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["dictionary_circuit"] == "closed"
