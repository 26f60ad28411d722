"""Column mapping between entities and hosted backend rows.

Remote tables use snake_case columns and carry a ``user_id`` owner column
that never reaches the local entity shape. Each mapping below lists every
field once in each direction.
"""

import json
from typing import Any, Dict, Mapping

from japaneasy.core import (
    Collection,
    Conjugations,
    GrammarEntry,
    MasteryLevel,
    PartOfSpeech,
    VocabularyEntry,
)

REMOTE_TABLES = {
    Collection.VOCABULARY: "words",
    Collection.GRAMMAR: "grammar_points",
}

OWNER_COLUMN = "user_id"
ORDER_COLUMN = "added_at"


def vocabulary_to_row(entry: VocabularyEntry, user_id: str) -> Dict[str, Any]:
    return {
        "id": entry.id,
        OWNER_COLUMN: user_id,
        "kanji": entry.kanji,
        "furigana": entry.furigana,
        "meaning": entry.meaning,
        "type": entry.part_of_speech.value,
        "example": entry.example,
        "example_furigana": entry.example_furigana,
        "example_translation": entry.example_translation,
        "conjugations": entry.conjugations.to_dict() if entry.conjugations else None,
        "added_at": entry.added_at,
        "is_saved": entry.is_saved,
        "mastery_level": int(entry.mastery_level),
    }


def row_to_vocabulary(row: Mapping[str, Any]) -> VocabularyEntry:
    conjugations = row.get("conjugations")
    if isinstance(conjugations, str):
        conjugations = json.loads(conjugations) if conjugations else None
    return VocabularyEntry(
        id=str(row["id"]),
        kanji=row.get("kanji") or "",
        furigana=row.get("furigana") or "",
        meaning=row.get("meaning") or "",
        part_of_speech=PartOfSpeech.parse(row.get("type")),
        example=row.get("example") or "",
        example_furigana=row.get("example_furigana") or "",
        example_translation=row.get("example_translation") or "",
        conjugations=Conjugations.from_dict(conjugations),
        added_at=int(row["added_at"]),
        is_saved=bool(row.get("is_saved")),
        mastery_level=MasteryLevel(int(row.get("mastery_level") or 0)),
    )


def grammar_to_row(entry: GrammarEntry, user_id: str) -> Dict[str, Any]:
    return {
        "id": entry.id,
        OWNER_COLUMN: user_id,
        "point": entry.point,
        "explanation": entry.explanation,
        "example": entry.example,
        "added_at": entry.added_at,
        "rating": entry.rating,
    }


def row_to_grammar(row: Mapping[str, Any]) -> GrammarEntry:
    return GrammarEntry(
        id=str(row["id"]),
        point=row.get("point") or "",
        explanation=row.get("explanation") or "",
        example=row.get("example") or "",
        added_at=int(row["added_at"]),
        rating=int(row.get("rating") or 0),
    )


def entry_to_row(collection: Collection, entry, user_id: str) -> Dict[str, Any]:
    if collection is Collection.VOCABULARY:
        return vocabulary_to_row(entry, user_id)
    return grammar_to_row(entry, user_id)


def row_to_entry(collection: Collection, row: Mapping[str, Any]):
    if collection is Collection.VOCABULARY:
        return row_to_vocabulary(row)
    return row_to_grammar(row)
