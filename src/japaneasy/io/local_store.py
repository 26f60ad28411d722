"""SQLite-backed local store for vocabulary and grammar entries."""

import dataclasses
import json
import logging
import sqlite3
import threading
import time
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from japaneasy.core import (
    Collection,
    Conjugations,
    GrammarEntry,
    LibrarySnapshot,
    LocalStoreError,
    MasteryLevel,
    PartOfSpeech,
    VocabularyEntry,
)

logger = logging.getLogger(__name__)

Entry = Union[VocabularyEntry, GrammarEntry]

EXPORT_FILENAME_TEMPLATE = "japaneasy_backup_{day}.json"

_TABLES = {
    Collection.VOCABULARY: "words",
    Collection.GRAMMAR: "grammar",
}

_IMMUTABLE_FIELDS = {"id", "added_at"}


class LocalStore:
    """Owns the SQLite connection, schema, and entry persistence helpers.

    The store is the system of record while no account is signed in. Every
    write commits in its own transaction, so a failed call leaves the previous
    state in place.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # Sync runs off the UI thread; access is serialized by self._lock.
        self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self.connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._schema_ready = False

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self._lock:
            cur = self.connection.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS words (
                    id TEXT PRIMARY KEY,
                    kanji TEXT NOT NULL DEFAULT '',
                    furigana TEXT NOT NULL DEFAULT '',
                    meaning TEXT NOT NULL DEFAULT '',
                    type TEXT NOT NULL DEFAULT 'other',
                    example TEXT NOT NULL DEFAULT '',
                    example_furigana TEXT NOT NULL DEFAULT '',
                    example_translation TEXT NOT NULL DEFAULT '',
                    conjugations TEXT,
                    added_at INTEGER NOT NULL,
                    is_saved INTEGER NOT NULL DEFAULT 0,
                    mastery_level INTEGER NOT NULL DEFAULT 0
                );
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS grammar (
                    id TEXT PRIMARY KEY,
                    point TEXT NOT NULL DEFAULT '',
                    explanation TEXT NOT NULL DEFAULT '',
                    example TEXT NOT NULL DEFAULT '',
                    added_at INTEGER NOT NULL,
                    rating INTEGER NOT NULL DEFAULT 0
                );
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_words_added_at ON words(added_at);")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_grammar_added_at ON grammar(added_at);")
            self.connection.commit()
            self._schema_ready = True

    def get_all(self, collection: Collection) -> List[Entry]:
        """Return every entry of a collection, newest first.

        An uninitialized database yields an empty list rather than an error.
        """
        table = _TABLES[collection]
        with self._lock:
            try:
                cur = self.connection.cursor()
                cur.execute(f"SELECT * FROM {table} ORDER BY added_at DESC, rowid DESC")
                rows = cur.fetchall()
            except sqlite3.OperationalError as exc:
                logger.debug("Reading %s before schema exists: %s", table, exc)
                return []
        return [self._row_to_entry(collection, row) for row in rows]

    def get(self, collection: Collection, entry_id: str) -> Optional[Entry]:
        table = _TABLES[collection]
        with self._lock:
            try:
                cur = self.connection.cursor()
                cur.execute(f"SELECT * FROM {table} WHERE id = ?", (entry_id,))
                row = cur.fetchone()
            except sqlite3.OperationalError:
                return None
        return self._row_to_entry(collection, row) if row else None

    def bulk_upsert(self, collection: Collection, entries: Sequence[Entry]) -> None:
        """Insert absent ids and overwrite present ones, all in one transaction."""
        if not entries:
            return
        with self._lock:
            self._require_schema()
            try:
                with self.connection:
                    self._execute_upsert(collection, entries)
            except sqlite3.Error as exc:
                raise LocalStoreError(
                    f"Failed to upsert {len(entries)} {collection.value} rows: {exc}"
                ) from exc

    def merge_snapshot(self, snapshot: LibrarySnapshot) -> None:
        """Upsert both collections in a single transaction.

        Entries missing from the snapshot are left untouched.
        """
        with self._lock:
            self._require_schema()
            try:
                with self.connection:
                    self._execute_upsert(Collection.VOCABULARY, snapshot.vocabulary)
                    self._execute_upsert(Collection.GRAMMAR, snapshot.grammar)
            except sqlite3.Error as exc:
                raise LocalStoreError(f"Failed to merge snapshot: {exc}") from exc

    def _require_schema(self) -> None:
        """Create the schema on the first write to a fresh database."""
        if not self._schema_ready:
            self.ensure_schema()

    def _execute_upsert(self, collection: Collection, entries: Sequence[Entry]) -> None:
        if not entries:
            return
        table = _TABLES[collection]
        rows = [self._entry_to_row(collection, entry) for entry in entries]
        columns = list(rows[0].keys())
        placeholders = ", ".join("?" for _ in columns)
        assignments = ", ".join(f"{col} = excluded.{col}" for col in columns if col != "id")
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {assignments}"
        )
        self.connection.executemany(sql, [tuple(row[col] for col in columns) for row in rows])

    def update(self, collection: Collection, entry_id: str, fields: Dict[str, Any]) -> bool:
        """Merge the supplied fields into an existing entry.

        Unknown ids are ignored. Returns True when a row was changed.

        Raises:
            ValueError: If a field is unknown or immutable (id, added_at).
        """
        if not fields:
            return False
        entry_type = VocabularyEntry if collection is Collection.VOCABULARY else GrammarEntry
        known = {f.name for f in dataclasses.fields(entry_type)}
        invalid = set(fields) - (known - _IMMUTABLE_FIELDS)
        if invalid:
            raise ValueError(f"Cannot update fields {sorted(invalid)} on {collection.value}")
        fields = dict(fields)
        if "mastery_level" in fields:
            fields["mastery_level"] = MasteryLevel(int(fields["mastery_level"]))
        if "part_of_speech" in fields and not isinstance(fields["part_of_speech"], PartOfSpeech):
            fields["part_of_speech"] = PartOfSpeech.parse(fields["part_of_speech"])

        with self._lock:
            existing = self.get(collection, entry_id)
            if existing is None:
                logger.debug("Ignoring update for unknown %s id %s", collection.value, entry_id)
                return False
            self.bulk_upsert(collection, [dataclasses.replace(existing, **fields)])
        return True

    def delete(self, collection: Collection, entry_id: str) -> None:
        table = _TABLES[collection]
        with self._lock:
            self._require_schema()
            try:
                with self.connection:
                    self.connection.execute(f"DELETE FROM {table} WHERE id = ?", (entry_id,))
            except sqlite3.Error as exc:
                raise LocalStoreError(f"Failed to delete {table} row {entry_id}: {exc}") from exc

    def snapshot(self) -> LibrarySnapshot:
        return LibrarySnapshot(
            vocabulary=self.get_all(Collection.VOCABULARY),
            grammar=self.get_all(Collection.GRAMMAR),
        )

    def export_snapshot(self, exported_at: Optional[int] = None) -> Dict[str, Any]:
        """Serialize both collections for a user backup. Does not mutate state."""
        return {
            "words": [entry.to_dict() for entry in self.get_all(Collection.VOCABULARY)],
            "grammar": [entry.to_dict() for entry in self.get_all(Collection.GRAMMAR)],
            "exportedAt": exported_at if exported_at is not None else int(time.time() * 1000),
        }

    def write_export(self, directory: Path, today: Optional[date] = None) -> Path:
        """Write the backup JSON into directory and return its path."""
        day = (today or date.today()).isoformat()
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / EXPORT_FILENAME_TEMPLATE.format(day=day)
        target.write_text(
            json.dumps(self.export_snapshot(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info("Exported backup to %s", target)
        return target

    def close(self) -> None:
        with self._lock:
            self.connection.close()

    @staticmethod
    def _entry_to_row(collection: Collection, entry: Entry) -> Dict[str, Any]:
        if collection is Collection.VOCABULARY:
            return {
                "id": entry.id,
                "kanji": entry.kanji,
                "furigana": entry.furigana,
                "meaning": entry.meaning,
                "type": entry.part_of_speech.value,
                "example": entry.example,
                "example_furigana": entry.example_furigana,
                "example_translation": entry.example_translation,
                "conjugations": (
                    json.dumps(entry.conjugations.to_dict(), ensure_ascii=False)
                    if entry.conjugations is not None
                    else None
                ),
                "added_at": entry.added_at,
                "is_saved": 1 if entry.is_saved else 0,
                "mastery_level": int(entry.mastery_level),
            }
        return {
            "id": entry.id,
            "point": entry.point,
            "explanation": entry.explanation,
            "example": entry.example,
            "added_at": entry.added_at,
            "rating": entry.rating,
        }

    @staticmethod
    def _row_to_entry(collection: Collection, row: sqlite3.Row) -> Entry:
        if collection is Collection.VOCABULARY:
            conjugations_raw = row["conjugations"]
            return VocabularyEntry(
                id=row["id"],
                kanji=row["kanji"],
                furigana=row["furigana"],
                meaning=row["meaning"],
                part_of_speech=PartOfSpeech.parse(row["type"]),
                example=row["example"],
                example_furigana=row["example_furigana"],
                example_translation=row["example_translation"],
                added_at=row["added_at"],
                conjugations=(
                    Conjugations.from_dict(json.loads(conjugations_raw))
                    if conjugations_raw
                    else None
                ),
                is_saved=bool(row["is_saved"]),
                mastery_level=MasteryLevel(row["mastery_level"]),
            )
        return GrammarEntry(
            id=row["id"],
            point=row["point"],
            explanation=row["explanation"],
            example=row["example"],
            added_at=row["added_at"],
            rating=row["rating"],
        )
