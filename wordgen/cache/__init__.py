from .result_cache import CacheLookup, ResultCache, fingerprint
from .stores import KeyValueStore, MemoryStore, PostgresStore

__all__ = [
    "CacheLookup",
    "KeyValueStore",
    "MemoryStore",
    "PostgresStore",
    "ResultCache",
    "fingerprint",
]
