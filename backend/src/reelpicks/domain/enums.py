"""Domain enumerations for the recommendation router."""

from __future__ import annotations

import enum


class ContentKind(str, enum.Enum):
    """What a recommendation points at."""

    MOVIE = "movie"
    SERIES = "series"


class Language(str, enum.Enum):
    """Languages the prompts are written in."""

    GREEK = "el"
    ENGLISH = "en"

    @classmethod
    def parse(cls, value: str | Language | None) -> Language:
        """Anything other than English falls back to Greek."""
        if isinstance(value, Language):
            return value
        return cls.ENGLISH if value == cls.ENGLISH.value else cls.GREEK


class ProviderFamily(str, enum.Enum):
    """Wire protocol a backend speaks."""

    GEMINI = "gemini"
    OPENROUTER = "openrouter"


class AttemptOutcome(str, enum.Enum):
    """Classified result of a single backend invocation."""

    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"
    EMPTY_RESPONSE = "empty_response"

    @property
    def is_recoverable(self) -> bool:
        return self in (
            AttemptOutcome.RATE_LIMITED,
            AttemptOutcome.NOT_FOUND,
            AttemptOutcome.EMPTY_RESPONSE,
        )


class FailureKind(str, enum.Enum):
    """Failure categories reported to callers."""

    CONFIG_ERROR = "CONFIG_ERROR"
    ALL_MODELS_EXHAUSTED = "ALL_MODELS_EXHAUSTED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    NETWORK_ERROR = "NETWORK_ERROR"
