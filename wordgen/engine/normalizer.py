from __future__ import annotations

import re
from typing import Any, Mapping

from pydantic import ValidationError

from wordgen.common.config import Settings
from wordgen.errors import InvalidInput
from wordgen.models import WordInput, WordRequest

WHITESPACE_RE = re.compile(r"\s+")


class InputNormalizer:
    """Validate raw characters and length bounds into a canonical WordInput.

    Whitespace is always removed and letters are uppercased. Characters
    outside the alphabet are rejected in strict mode and dropped otherwise.
    """

    def __init__(
        self,
        *,
        alphabet: str = "A-Za-z",
        min_characters: int = 2,
        max_characters: int = 15,
        supported_languages: tuple[str, ...] = ("en", "es", "fr", "de"),
        strict: bool = True,
    ) -> None:
        self.outside_alphabet = re.compile(f"[^{alphabet}]")
        self.min_characters = min_characters
        self.max_characters = max_characters
        self.supported_languages = tuple(lang.lower() for lang in supported_languages)
        self.strict = strict

    @classmethod
    def from_settings(cls, settings: Settings) -> InputNormalizer:
        return cls(
            alphabet=settings.alphabet,
            min_characters=settings.min_characters,
            max_characters=settings.max_characters,
            supported_languages=settings.supported_languages,
            strict=settings.strict_characters,
        )

    def clean(self, characters: Any) -> str:
        if isinstance(characters, bytes):
            try:
                characters = characters.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidInput("characters must be valid UTF-8 text") from exc
        if not isinstance(characters, str):
            raise InvalidInput("characters must be a string")

        compact = WHITESPACE_RE.sub("", characters)
        if self.outside_alphabet.search(compact):
            if self.strict:
                raise InvalidInput("characters must contain only letters")
            compact = self.outside_alphabet.sub("", compact)
        return compact.upper()

    def normalize(self, raw: WordRequest | WordInput | Mapping[str, Any] | str) -> WordInput:
        request = self._coerce(raw)
        characters = self.clean(request.characters)

        if not self.min_characters <= len(characters) <= self.max_characters:
            raise InvalidInput(
                f"characters must contain between {self.min_characters} and {self.max_characters} letters"
            )

        language = (request.language or "").strip().lower()
        if language not in self.supported_languages:
            raise InvalidInput(f"unsupported language: {request.language!r}")

        min_length = request.min_length if request.min_length is not None else min(2, len(characters))
        max_length = request.max_length if request.max_length is not None else len(characters)
        if not 1 <= min_length <= max_length <= len(characters):
            raise InvalidInput(
                f"length bounds must satisfy 1 <= minLength <= maxLength <= {len(characters)}"
            )

        return WordInput(
            characters=characters,
            language=language,
            min_length=min_length,
            max_length=max_length,
            filters=request.filters,
        )

    def _coerce(self, raw: Any) -> WordRequest | WordInput:
        if isinstance(raw, (WordRequest, WordInput)):
            return raw
        if isinstance(raw, (str, bytes)):
            return WordRequest(characters=raw)
        if isinstance(raw, Mapping):
            try:
                return WordRequest.model_validate(raw)
            except ValidationError as exc:
                raise InvalidInput(f"malformed request: {exc.errors()[0]['msg']}") from exc
        raise InvalidInput("request must be a mapping or a string of characters")
