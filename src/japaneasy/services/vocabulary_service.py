"""Vocabulary Service - builds entries from analyses and selects study sets."""

import random
import time
import uuid
from enum import Enum
from typing import Callable, List, Optional, Tuple

from japaneasy.core import GrammarEntry, MasteryLevel, VocabularyEntry
from japaneasy.services.analysis import AnalysisResult

RECENT_WINDOW_MS = 7 * 24 * 60 * 60 * 1000
MIN_QUIZ_POOL = 5
MAX_QUIZ_QUESTIONS = 15


class LibraryFilter(str, Enum):
    ALL = "all"
    SAVED = "saved"


class Deck(str, Enum):
    SAVED = "saved"
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"
    TOO_HARD = "too_hard"


class QuizScope(str, Enum):
    ALL = "all"
    RECENT = "recent"


class InsufficientWordsError(ValueError):
    """Raised when a quiz pool is smaller than MIN_QUIZ_POOL."""


_DECK_LEVELS = {
    Deck.NEW: MasteryLevel.NEW,
    Deck.LEARNING: MasteryLevel.LEARNING,
    Deck.MASTERED: MasteryLevel.MASTERED,
    Deck.TOO_HARD: MasteryLevel.TOO_HARD,
}


def now_ms() -> int:
    return int(time.time() * 1000)


class VocabularyService:
    """Application service for turning analyses into entries and picking study sets.

    Stateless apart from the id factory, which tests may replace.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))

    def create_entries(
        self, result: AnalysisResult, created_at: Optional[int] = None
    ) -> Tuple[List[VocabularyEntry], List[GrammarEntry]]:
        """Assign ids, one shared creation time, and default study state."""
        stamp = created_at if created_at is not None else now_ms()
        words = [
            VocabularyEntry(
                id=self._new_id(),
                kanji=candidate.kanji,
                furigana=candidate.furigana,
                meaning=candidate.meaning,
                part_of_speech=candidate.part_of_speech,
                example=candidate.example,
                example_furigana=candidate.example_furigana,
                example_translation=candidate.example_translation,
                conjugations=candidate.conjugations,
                added_at=stamp,
                is_saved=False,
                mastery_level=MasteryLevel.NEW,
            )
            for candidate in result.words
        ]
        grammar = [
            GrammarEntry(
                id=self._new_id(),
                point=candidate.point,
                explanation=candidate.explanation,
                example=candidate.example,
                added_at=stamp,
                rating=0,
            )
            for candidate in result.grammar
        ]
        return words, grammar

    @staticmethod
    def filter_words(words: List[VocabularyEntry], library_filter: LibraryFilter) -> List[VocabularyEntry]:
        if library_filter is LibraryFilter.SAVED:
            return [word for word in words if word.is_saved]
        return list(words)

    @staticmethod
    def flashcard_deck(words: List[VocabularyEntry], deck: Deck) -> List[VocabularyEntry]:
        if deck is Deck.SAVED:
            return [word for word in words if word.is_saved]
        level = _DECK_LEVELS[deck]
        return [word for word in words if word.mastery_level == level]

    @staticmethod
    def mastery_percent(words: List[VocabularyEntry]) -> int:
        """Share of mastered words, with halves rounded up."""
        if not words:
            return 0
        mastered = sum(1 for word in words if word.mastery_level == MasteryLevel.MASTERED)
        return int(mastered * 100 / len(words) + 0.5)

    @staticmethod
    def bookmarked_grammar(grammar: List[GrammarEntry]) -> List[GrammarEntry]:
        return [entry for entry in grammar if entry.is_bookmarked]

    @staticmethod
    def build_quiz(
        words: List[VocabularyEntry],
        scope: QuizScope = QuizScope.ALL,
        current_ms: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> List[VocabularyEntry]:
        """Pick up to MAX_QUIZ_QUESTIONS shuffled words.

        Raises:
            InsufficientWordsError: If fewer than MIN_QUIZ_POOL words qualify.
        """
        pool = list(words)
        if scope is QuizScope.RECENT:
            cutoff = (current_ms if current_ms is not None else now_ms()) - RECENT_WINDOW_MS
            pool = [word for word in pool if word.added_at > cutoff]
        if len(pool) < MIN_QUIZ_POOL:
            raise InsufficientWordsError(
                f"Need at least {MIN_QUIZ_POOL} words for a quiz, found {len(pool)}"
            )
        (rng or random.Random()).shuffle(pool)
        return pool[:MAX_QUIZ_QUESTIONS]
