"""Services layer - business logic and external integrations."""

from japaneasy.services.settings_manager import SettingsManager
from japaneasy.services.vocabulary_service import (
	Deck,
	InsufficientWordsError,
	LibraryFilter,
	QuizScope,
	VocabularyService,
)
from japaneasy.services.flashcard_session import CardOutcome, FlashcardSession, QuizSession

# Analysis services
from japaneasy.services.analysis import AnalysisService, AnalysisResult, GeminiAnalysisService

# Pronunciation services
from japaneasy.services.pronunciation import (
	GeminiPronunciationService,
	PronunciationResult,
	PronunciationService,
)

__all__ = [
	"SettingsManager",
	"VocabularyService",
	"LibraryFilter",
	"Deck",
	"QuizScope",
	"InsufficientWordsError",
	"FlashcardSession",
	"QuizSession",
	"CardOutcome",
	"AnalysisService",
	"AnalysisResult",
	"GeminiAnalysisService",
	"PronunciationService",
	"PronunciationResult",
	"GeminiPronunciationService",
]
