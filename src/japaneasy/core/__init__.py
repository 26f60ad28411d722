"""Domain layer - study entities and the error taxonomy."""

from .errors import (
    AnalysisError,
    AuthError,
    ConfigurationError,
    JapaneasyError,
    LocalStoreError,
    RemoteError,
    classify_remote_error,
    is_configuration_error,
)
from .session_context import DEFAULT_REMOTE_TIMEOUT, Account, SessionContext
from .study_entities import (
    CONJUGATION_FORMS,
    Collection,
    Conjugations,
    GrammarEntry,
    LibrarySnapshot,
    MasteryLevel,
    PartOfSpeech,
    VocabularyEntry,
)

__all__ = [
    "Account",
    "SessionContext",
    "DEFAULT_REMOTE_TIMEOUT",
    "Collection",
    "Conjugations",
    "CONJUGATION_FORMS",
    "GrammarEntry",
    "LibrarySnapshot",
    "MasteryLevel",
    "PartOfSpeech",
    "VocabularyEntry",
    "JapaneasyError",
    "AuthError",
    "RemoteError",
    "ConfigurationError",
    "LocalStoreError",
    "AnalysisError",
    "classify_remote_error",
    "is_configuration_error",
]
