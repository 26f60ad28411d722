import json
from datetime import date

import pytest

from conftest import make_grammar, make_word
from japaneasy.core import (
    Collection,
    Conjugations,
    LibrarySnapshot,
    LocalStoreError,
    MasteryLevel,
    PartOfSpeech,
)
from japaneasy.io import LocalStore


def test_schema_created(local_store):
    cur = local_store.connection.cursor()
    cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
    table_names = {row["name"] for row in cur.fetchall()}
    assert {"words", "grammar"}.issubset(table_names)


def test_get_all_on_uninitialized_store_is_empty(tmp_path):
    store = LocalStore(tmp_path / "fresh.db")
    try:
        assert store.get_all(Collection.VOCABULARY) == []
        assert store.get_all(Collection.GRAMMAR) == []
        assert store.get(Collection.VOCABULARY, "missing") is None
    finally:
        store.close()


def test_first_write_creates_schema(tmp_path):
    store = LocalStore(tmp_path / "fresh.db")
    try:
        store.bulk_upsert(Collection.VOCABULARY, [make_word("a")])
        store.delete(Collection.GRAMMAR, "missing")

        assert [w.id for w in store.get_all(Collection.VOCABULARY)] == ["a"]
        assert store.update(Collection.VOCABULARY, "a", {"is_saved": True})
        assert store.get(Collection.VOCABULARY, "a").is_saved is True
    finally:
        store.close()


def test_get_all_returns_newest_first(local_store):
    local_store.bulk_upsert(
        Collection.VOCABULARY,
        [make_word("old", added_at=100), make_word("new", added_at=300), make_word("mid", added_at=200)],
    )

    ids = [word.id for word in local_store.get_all(Collection.VOCABULARY)]
    assert ids == ["new", "mid", "old"]


def test_bulk_upsert_overwrites_whole_record(local_store):
    local_store.bulk_upsert(Collection.VOCABULARY, [make_word("a", meaning="to eat", is_saved=True)])
    local_store.bulk_upsert(Collection.VOCABULARY, [make_word("a", meaning="eat (formal)")])

    stored = local_store.get(Collection.VOCABULARY, "a")
    assert stored.meaning == "eat (formal)"
    assert stored.is_saved is False
    assert len(local_store.get_all(Collection.VOCABULARY)) == 1


def test_bulk_upsert_is_idempotent(local_store):
    entries = [make_grammar("g1"), make_grammar("g2", added_at=2_000)]
    local_store.bulk_upsert(Collection.GRAMMAR, entries)
    first = local_store.get_all(Collection.GRAMMAR)
    local_store.bulk_upsert(Collection.GRAMMAR, entries)

    assert local_store.get_all(Collection.GRAMMAR) == first


def test_conjugations_survive_storage(local_store):
    forms = Conjugations(dictionary="食べる", masu="食べます", te="食べて", nai="食べない", ta="食べた")
    local_store.bulk_upsert(Collection.VOCABULARY, [make_word("v", conjugations=forms)])

    stored = local_store.get(Collection.VOCABULARY, "v")
    assert stored.conjugations == forms
    assert stored.part_of_speech is PartOfSpeech.VERB
    assert stored.has_verb_forms


def test_update_merges_only_supplied_fields(local_store):
    local_store.bulk_upsert(Collection.VOCABULARY, [make_word("a", meaning="to eat")])

    changed = local_store.update(Collection.VOCABULARY, "a", {"mastery_level": 2, "is_saved": True})

    stored = local_store.get(Collection.VOCABULARY, "a")
    assert changed is True
    assert stored.mastery_level is MasteryLevel.MASTERED
    assert stored.is_saved is True
    assert stored.meaning == "to eat"
    assert stored.added_at == 1_000


def test_update_unknown_id_is_a_silent_noop(local_store):
    assert local_store.update(Collection.GRAMMAR, "ghost", {"rating": 3}) is False
    assert local_store.get_all(Collection.GRAMMAR) == []


def test_update_refuses_immutable_fields(local_store):
    local_store.bulk_upsert(Collection.GRAMMAR, [make_grammar("g")])

    with pytest.raises(ValueError):
        local_store.update(Collection.GRAMMAR, "g", {"added_at": 5})
    with pytest.raises(ValueError):
        local_store.update(Collection.GRAMMAR, "g", {"nonsense": 1})


def test_delete_removes_and_tolerates_missing(local_store):
    local_store.bulk_upsert(Collection.GRAMMAR, [make_grammar("g")])

    local_store.delete(Collection.GRAMMAR, "g")
    local_store.delete(Collection.GRAMMAR, "g")

    assert local_store.get(Collection.GRAMMAR, "g") is None


def test_merge_snapshot_never_removes_local_only_entries(local_store):
    local_store.bulk_upsert(Collection.VOCABULARY, [make_word("local-only")])

    local_store.merge_snapshot(
        LibrarySnapshot(vocabulary=[make_word("remote")], grammar=[make_grammar("g")])
    )

    ids = {word.id for word in local_store.get_all(Collection.VOCABULARY)}
    assert ids == {"local-only", "remote"}
    assert local_store.get(Collection.GRAMMAR, "g") is not None


def test_failed_merge_leaves_store_unchanged(local_store):
    local_store.bulk_upsert(Collection.VOCABULARY, [make_word("keep", meaning="first meaning")])
    local_store.connection.execute("DROP TABLE grammar")

    with pytest.raises(LocalStoreError):
        local_store.merge_snapshot(
            LibrarySnapshot(
                vocabulary=[make_word("keep", meaning="changed"), make_word("new")],
                grammar=[make_grammar("g")],
            )
        )

    words = local_store.get_all(Collection.VOCABULARY)
    assert [word.id for word in words] == ["keep"]
    assert words[0].meaning == "first meaning"


def test_export_snapshot_shape(local_store):
    local_store.bulk_upsert(Collection.VOCABULARY, [make_word("a", is_saved=True)])
    local_store.bulk_upsert(Collection.GRAMMAR, [make_grammar("g", rating=4)])

    snapshot = local_store.export_snapshot(exported_at=42)

    assert set(snapshot) == {"words", "grammar", "exportedAt"}
    assert snapshot["exportedAt"] == 42
    assert snapshot["words"][0]["exampleFurigana"] == "ごはんをたべる。"
    assert snapshot["words"][0]["isSaved"] is True
    assert snapshot["grammar"][0]["rating"] == 4


def test_write_export_names_file_by_date(local_store, tmp_path):
    local_store.bulk_upsert(Collection.GRAMMAR, [make_grammar("g")])

    path = local_store.write_export(tmp_path / "backups", today=date(2026, 10, 16))

    assert path.name == "japaneasy_backup_2026-10-16.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [item["id"] for item in data["grammar"]] == ["g"]
    assert data["words"] == []
