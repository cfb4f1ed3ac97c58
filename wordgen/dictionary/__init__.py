from .breaker import BreakerState, CircuitBreaker
from .sources import DictionarySource, HttpDictionary, PostgresDictionary, WordListDictionary
from .validator import BatchValidation, DictionaryValidator, classification_accuracy

__all__ = [
    "BatchValidation",
    "BreakerState",
    "CircuitBreaker",
    "DictionarySource",
    "DictionaryValidator",
    "HttpDictionary",
    "PostgresDictionary",
    "WordListDictionary",
    "classification_accuracy",
]
