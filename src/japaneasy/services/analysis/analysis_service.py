"""Analysis Service - turns a study-material photo into candidate entries."""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from japaneasy.core import AnalysisError, Conjugations, PartOfSpeech

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


@dataclass
class WordCandidate:
    """A vocabulary entry as proposed by the model, before ids and defaults."""

    kanji: str
    furigana: str
    meaning: str
    part_of_speech: PartOfSpeech
    example: str = ""
    example_furigana: str = ""
    example_translation: str = ""
    conjugations: Optional[Conjugations] = None


@dataclass
class GrammarCandidate:
    point: str
    explanation: str
    example: str = ""


@dataclass
class AnalysisResult:
    """Result of an image analysis request."""

    words: List[WordCandidate] = field(default_factory=list)
    grammar: List[GrammarCandidate] = field(default_factory=list)
    model: Optional[str] = None
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.error is None


class AnalysisService(ABC):
    """
    Abstract service for extracting vocabulary and grammar from an image.

    Implementations (e.g., GeminiAnalysisService) handle API calls.
    """

    @abstractmethod
    def analyze(self, image_bytes: bytes, mime_type: str, api_key: str) -> AnalysisResult:
        """Analyze an image of Japanese study material.

        Args:
            image_bytes: Raw image content.
            mime_type: Declared media type, e.g. ``image/jpeg``.
            api_key: Gemini API key for authentication.

        Returns:
            AnalysisResult with candidates or an error message.
        """
        pass


def _text(item: Dict[str, Any], key: str) -> str:
    value = item.get(key)
    if value is None:
        return ""
    if not isinstance(value, (str, int, float)):
        raise AnalysisError(f"Field '{key}' must be text, got {type(value).__name__}")
    return str(value).strip()


def _parse_word(item: Any) -> WordCandidate:
    if not isinstance(item, dict):
        raise AnalysisError(f"Word entry must be an object, got {type(item).__name__}")
    kanji = _text(item, "kanji")
    meaning = _text(item, "meaning")
    if not kanji or not meaning:
        raise AnalysisError("Word entry is missing 'kanji' or 'meaning'")
    conjugations = item.get("conjugations")
    if conjugations is not None and not isinstance(conjugations, dict):
        raise AnalysisError("Word 'conjugations' must be an object")
    return WordCandidate(
        kanji=kanji,
        furigana=_text(item, "furigana"),
        meaning=meaning,
        part_of_speech=PartOfSpeech.parse(_text(item, "type")),
        example=_text(item, "example"),
        example_furigana=_text(item, "exampleFurigana"),
        example_translation=_text(item, "exampleTranslation"),
        conjugations=Conjugations.from_dict(conjugations),
    )


def _parse_grammar(item: Any) -> GrammarCandidate:
    if not isinstance(item, dict):
        raise AnalysisError(f"Grammar entry must be an object, got {type(item).__name__}")
    point = _text(item, "point")
    explanation = _text(item, "explanation")
    if not point or not explanation:
        raise AnalysisError("Grammar entry is missing 'point' or 'explanation'")
    return GrammarCandidate(point=point, explanation=explanation, example=_text(item, "example"))


def parse_analysis_payload(text: str) -> Tuple[List[WordCandidate], List[GrammarCandidate]]:
    """Validate the model's JSON reply.

    A reply that is not a JSON object with list-valued ``words`` and
    ``grammar`` is rejected. Individual malformed candidates are dropped.

    Raises:
        AnalysisError: If the reply cannot be used at all.
    """
    sanitized = _FENCE_PATTERN.sub("", text or "").strip()
    if not sanitized:
        raise AnalysisError("Empty response from model")
    try:
        payload = json.loads(sanitized)
    except json.JSONDecodeError as exc:
        raise AnalysisError(f"Response is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise AnalysisError("Response must be a JSON object")

    raw_words = payload.get("words") or []
    raw_grammar = payload.get("grammar") or []
    if not isinstance(raw_words, list) or not isinstance(raw_grammar, list):
        raise AnalysisError("'words' and 'grammar' must be lists")

    words: List[WordCandidate] = []
    for item in raw_words:
        try:
            words.append(_parse_word(item))
        except AnalysisError as exc:
            logger.warning("Dropping word candidate: %s", exc)

    grammar: List[GrammarCandidate] = []
    for item in raw_grammar:
        try:
            grammar.append(_parse_grammar(item))
        except AnalysisError as exc:
            logger.warning("Dropping grammar candidate: %s", exc)

    return words, grammar
