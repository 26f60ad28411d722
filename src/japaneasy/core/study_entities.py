"""Study entities shared by persistence, sync and study services."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional


class Collection(str, Enum):
    """The two entity collections kept in both stores."""

    VOCABULARY = "words"
    GRAMMAR = "grammar"


class PartOfSpeech(str, Enum):
    VERB = "verb"
    NOUN = "noun"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PARTICLE = "particle"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PartOfSpeech":
        """Map a loose tag to the closed enumeration, falling back to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.OTHER


class MasteryLevel(IntEnum):
    NEW = 0
    LEARNING = 1
    MASTERED = 2
    TOO_HARD = 3


CONJUGATION_FORMS = ("dictionary", "masu", "te", "nai", "ta")


@dataclass(frozen=True)
class Conjugations:
    dictionary: str
    masu: str
    te: str
    nai: str
    ta: str

    def to_dict(self) -> Dict[str, str]:
        return {form: getattr(self, form) for form in CONJUGATION_FORMS}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Conjugations"]:
        if not data:
            return None
        return cls(**{form: str(data.get(form) or "") for form in CONJUGATION_FORMS})


@dataclass
class VocabularyEntry:
    id: str
    kanji: str
    furigana: str
    meaning: str
    part_of_speech: PartOfSpeech
    example: str
    example_furigana: str
    example_translation: str
    added_at: int
    conjugations: Optional[Conjugations] = None
    is_saved: bool = False
    mastery_level: MasteryLevel = MasteryLevel.NEW

    @property
    def has_verb_forms(self) -> bool:
        """Verb-specific views only apply when conjugations were provided."""
        return self.part_of_speech is PartOfSpeech.VERB and self.conjugations is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase shape used by backups."""
        data: Dict[str, Any] = {
            "id": self.id,
            "kanji": self.kanji,
            "furigana": self.furigana,
            "meaning": self.meaning,
            "type": self.part_of_speech.value,
            "example": self.example,
            "exampleFurigana": self.example_furigana,
            "exampleTranslation": self.example_translation,
            "addedAt": self.added_at,
            "isSaved": self.is_saved,
            "masteryLevel": int(self.mastery_level),
        }
        if self.conjugations is not None:
            data["conjugations"] = self.conjugations.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VocabularyEntry":
        return cls(
            id=str(data["id"]),
            kanji=data.get("kanji") or "",
            furigana=data.get("furigana") or "",
            meaning=data.get("meaning") or "",
            part_of_speech=PartOfSpeech.parse(data.get("type")),
            example=data.get("example") or "",
            example_furigana=data.get("exampleFurigana") or "",
            example_translation=data.get("exampleTranslation") or "",
            added_at=int(data["addedAt"]),
            conjugations=Conjugations.from_dict(data.get("conjugations")),
            is_saved=bool(data.get("isSaved", False)),
            mastery_level=MasteryLevel(int(data.get("masteryLevel") or 0)),
        )


@dataclass
class GrammarEntry:
    id: str
    point: str
    explanation: str
    example: str
    added_at: int
    rating: int = 0

    MAX_RATING = 5

    @property
    def is_bookmarked(self) -> bool:
        return self.rating > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "point": self.point,
            "explanation": self.explanation,
            "example": self.example,
            "addedAt": self.added_at,
            "rating": self.rating,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GrammarEntry":
        return cls(
            id=str(data["id"]),
            point=data.get("point") or "",
            explanation=data.get("explanation") or "",
            example=data.get("example") or "",
            added_at=int(data["addedAt"]),
            rating=int(data.get("rating") or 0),
        )


@dataclass
class LibrarySnapshot:
    """Both collections as one unit, newest first."""

    vocabulary: List[VocabularyEntry] = field(default_factory=list)
    grammar: List[GrammarEntry] = field(default_factory=list)

    def ids(self, collection: Collection) -> List[str]:
        entries = self.vocabulary if collection is Collection.VOCABULARY else self.grammar
        return [entry.id for entry in entries]
