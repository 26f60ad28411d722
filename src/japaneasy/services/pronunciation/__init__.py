"""Pronunciation services - abstract interface and Gemini TTS implementation."""

from japaneasy.services.pronunciation.pronunciation_service import (
    PronunciationResult,
    PronunciationService,
)
from japaneasy.services.pronunciation.gemini_pronunciation_service import (
    GeminiPronunciationService,
)

__all__ = [
    "PronunciationService",
    "PronunciationResult",
    "GeminiPronunciationService",
]
