"""Analysis services - abstract interface and Gemini implementation."""

from japaneasy.services.analysis.analysis_service import (
    AnalysisResult,
    AnalysisService,
    GrammarCandidate,
    WordCandidate,
    parse_analysis_payload,
)
from japaneasy.services.analysis.gemini_analysis_service import GeminiAnalysisService

__all__ = [
    "AnalysisService",
    "AnalysisResult",
    "WordCandidate",
    "GrammarCandidate",
    "GeminiAnalysisService",
    "parse_analysis_payload",
]
