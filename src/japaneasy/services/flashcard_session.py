"""Flashcard and quiz session state, independent of any view."""

from enum import Enum
from typing import Callable, List, Optional

from japaneasy.core import MasteryLevel, VocabularyEntry


class CardOutcome(str, Enum):
    MASTERED = "mastered"
    UNSURE = "unsure"
    TOO_HARD = "too_hard"


OUTCOME_LEVELS = {
    CardOutcome.MASTERED: MasteryLevel.MASTERED,
    CardOutcome.UNSURE: MasteryLevel.LEARNING,
    CardOutcome.TOO_HARD: MasteryLevel.TOO_HARD,
}


class FlashcardSession:
    """Walks a deck one card at a time and reports each judgement.

    Args:
        words: The deck, in presentation order.
        on_mark: Called with (word_id, new_mastery_level) for each judgement.
    """

    def __init__(
        self,
        words: List[VocabularyEntry],
        on_mark: Optional[Callable[[str, MasteryLevel], None]] = None,
    ) -> None:
        self.words = list(words)
        self._on_mark = on_mark
        self.index = 0
        self.is_flipped = False
        self.is_completed = not self.words

    @property
    def current(self) -> Optional[VocabularyEntry]:
        if self.is_completed or not self.words:
            return None
        return self.words[self.index]

    @property
    def position(self) -> str:
        return f"{min(self.index + 1, len(self.words))} / {len(self.words)}"

    def flip(self) -> None:
        if self.current is not None:
            self.is_flipped = not self.is_flipped

    def mark(self, outcome: CardOutcome) -> None:
        word = self.current
        if word is None:
            return
        if self._on_mark is not None:
            self._on_mark(word.id, OUTCOME_LEVELS[outcome])
        self._advance()

    def replace_deck(self, words: List[VocabularyEntry]) -> None:
        """Swap in a refreshed deck, keeping the index in bounds."""
        was_empty = not self.words
        self.words = list(words)
        if not self.words:
            self.is_completed = True
            return
        if was_empty:
            self.is_completed = False
        if self.index >= len(self.words):
            self.index = len(self.words) - 1

    def restart(self) -> None:
        self.index = 0
        self.is_flipped = False
        self.is_completed = not self.words

    def _advance(self) -> None:
        self.is_flipped = False
        if self.index >= len(self.words) - 1:
            self.is_completed = True
        else:
            self.index += 1


class QuizSession:
    """Tracks the score of a meaning-recall quiz."""

    def __init__(self, words: List[VocabularyEntry]) -> None:
        self.words = list(words)
        self.index = 0
        self.score = 0
        self.is_finished = not self.words

    @property
    def current(self) -> Optional[VocabularyEntry]:
        return None if self.is_finished else self.words[self.index]

    @property
    def progress(self) -> float:
        """Fraction of questions reached, for a progress bar."""
        if not self.words:
            return 1.0
        return min(self.index + 1, len(self.words)) / len(self.words)

    def answer(self, correct: bool) -> None:
        if self.is_finished:
            return
        if correct:
            self.score += 1
        if self.index >= len(self.words) - 1:
            self.is_finished = True
        else:
            self.index += 1
