import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip().lower() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    # Input policy
    min_characters: int = int(os.getenv("WORDGEN_MIN_CHARACTERS", "2"))
    max_characters: int = int(os.getenv("WORDGEN_MAX_CHARACTERS", "15"))
    alphabet: str = os.getenv("WORDGEN_ALPHABET", "A-Za-z")
    strict_characters: bool = os.getenv("WORDGEN_STRICT_CHARACTERS", "1") not in ("0", "false", "False")
    supported_languages: tuple[str, ...] = _csv(os.getenv("WORDGEN_LANGUAGES", "en,es,fr,de"))

    # Generation budgets
    generation_mode: str = os.getenv("WORDGEN_MODE", "permutation")
    max_combinations: int = int(os.getenv("WORDGEN_MAX_COMBINATIONS", "100000"))
    memory_limit_mb: float = float(os.getenv("WORDGEN_MEMORY_LIMIT_MB", "32"))
    max_search_space: int = int(os.getenv("WORDGEN_MAX_SEARCH_SPACE", "10000000000000"))
    max_word_length: int = int(os.getenv("WORDGEN_MAX_WORD_LENGTH", "15"))
    request_timeout_s: float = float(os.getenv("WORDGEN_REQUEST_TIMEOUT_S", "5"))
    worker_threads: int = int(os.getenv("WORDGEN_WORKER_THREADS", "4"))

    # Result cache
    cache_backend: str = os.getenv("WORDGEN_CACHE_BACKEND", "memory")
    cache_ttl_s: float = float(os.getenv("WORDGEN_CACHE_TTL_S", "60"))

    # Dictionary collaborator
    dictionary_backend: str = os.getenv("WORDGEN_DICTIONARY_BACKEND", "wordlist")
    dictionary_wordlist_path: str = os.getenv("WORDGEN_DICTIONARY_WORDLIST", "")
    dictionary_url: str = os.getenv("WORDGEN_DICTIONARY_URL", "https://od-api.oxforddictionaries.com/api/v2")
    dictionary_app_id: str = os.getenv("WORDGEN_DICTIONARY_APP_ID", "")
    dictionary_app_key: str = os.getenv("WORDGEN_DICTIONARY_APP_KEY", "")
    dictionary_timeout_s: float = float(os.getenv("WORDGEN_DICTIONARY_TIMEOUT_S", "3"))
    validation_batch_size: int = int(os.getenv("WORDGEN_VALIDATION_BATCH_SIZE", "100"))
    validation_timeout_s: float = float(os.getenv("WORDGEN_VALIDATION_TIMEOUT_S", "2"))
    breaker_max_failures: int = int(os.getenv("WORDGEN_BREAKER_MAX_FAILURES", "5"))
    breaker_cooldown_s: float = float(os.getenv("WORDGEN_BREAKER_COOLDOWN_S", "30"))
    accuracy_target: float = float(os.getenv("WORDGEN_ACCURACY_TARGET", "0.95"))


settings = Settings()
