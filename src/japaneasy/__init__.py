"""
Japaneasy - a photo-to-flashcard companion for Japanese learners.

This package provides:
- Gemini-powered extraction of vocabulary and grammar from study material
- A local SQLite library that works offline
- Optional account-based sync to a hosted Supabase backend
- Flashcard and quiz session logic
"""

__version__ = "0.1.0"

# Make key components available at package level
from japaneasy.core import GrammarEntry, LibrarySnapshot, VocabularyEntry
from japaneasy.io import LocalStore

__all__ = [
    "VocabularyEntry",
    "GrammarEntry",
    "LibrarySnapshot",
    "LocalStore",
]
