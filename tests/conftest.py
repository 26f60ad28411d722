"""Shared fixtures: a temp local store, an in-memory remote store, and an inline pool."""

import copy
import threading
from typing import Callable, Dict, List, Optional, Tuple

import pytest
from PySide6.QtCore import QCoreApplication

from japaneasy.core import (
    Account,
    AuthError,
    Collection,
    GrammarEntry,
    MasteryLevel,
    PartOfSpeech,
    SessionContext,
    VocabularyEntry,
)
from japaneasy.io import LocalStore, RemoteStore


class FakeRemoteStore(RemoteStore):
    """In-memory RemoteStore keyed by (account id, entry id)."""

    def __init__(self, context: SessionContext) -> None:
        super().__init__(context)
        self.rows: Dict[Collection, Dict[Tuple[str, str], object]] = {
            Collection.VOCABULARY: {},
            Collection.GRAMMAR: {},
        }
        self.calls: List[Tuple[str, Collection, Optional[str]]] = []
        self.upsert_error: Optional[Exception] = None
        self.fetch_error: Optional[Exception] = None
        self.on_upsert: Optional[Callable[[], None]] = None
        self.password = "secret"
        self._lock = threading.Lock()

    def seed(self, account_id: str, collection: Collection, entry) -> None:
        self.rows[collection][(account_id, entry.id)] = copy.deepcopy(entry)

    def ids(self, account_id: str, collection: Collection) -> set:
        return {entry_id for owner, entry_id in self.rows[collection] if owner == account_id}

    def sign_in(self, email: str, password: str) -> Account:
        if password != self.password:
            raise AuthError("Invalid login credentials")
        account = Account(id=f"user-{email}", email=email)
        self.context.establish(account)
        return account

    def fetch_all(self, collection: Collection):
        with self._lock:
            self.calls.append(("fetch_all", collection, None))
        user_id = self.current_user()
        if user_id is None:
            raise AuthError("No account")
        if self.fetch_error is not None:
            raise self.fetch_error
        entries = [
            copy.deepcopy(entry)
            for (owner, _), entry in self.rows[collection].items()
            if owner == user_id
        ]
        return sorted(entries, key=lambda e: e.added_at, reverse=True)

    def upsert(self, collection: Collection, entry) -> None:
        with self._lock:
            self.calls.append(("upsert", collection, entry.id))
        if self.on_upsert is not None:
            self.on_upsert()
        user_id = self.current_user()
        if user_id is None:
            return
        if self.upsert_error is not None:
            raise self.upsert_error
        with self._lock:
            self.rows[collection][(user_id, entry.id)] = copy.deepcopy(entry)

    def delete(self, collection: Collection, entry_id: str) -> None:
        with self._lock:
            self.calls.append(("delete", collection, entry_id))
        user_id = self.current_user()
        if user_id is None:
            return
        with self._lock:
            self.rows[collection].pop((user_id, entry_id), None)


class InlineThreadPool:
    """QThreadPool stand-in that runs workers immediately on the caller's thread."""

    def __init__(self):
        self.started = []

    def start(self, runnable):
        self.started.append(runnable)
        runnable.run()


def make_word(entry_id: str, added_at: int = 1_000, **overrides) -> VocabularyEntry:
    fields = dict(
        id=entry_id,
        kanji="食べる",
        furigana="たべる",
        meaning="to eat",
        part_of_speech=PartOfSpeech.VERB,
        example="ご飯を食べる。",
        example_furigana="ごはんをたべる。",
        example_translation="I eat rice.",
        added_at=added_at,
        conjugations=None,
        is_saved=False,
        mastery_level=MasteryLevel.NEW,
    )
    fields.update(overrides)
    return VocabularyEntry(**fields)


def make_grammar(entry_id: str, added_at: int = 1_000, **overrides) -> GrammarEntry:
    fields = dict(
        id=entry_id,
        point="〜ている",
        explanation="ongoing action or state",
        example="今、食べている。",
        added_at=added_at,
        rating=0,
    )
    fields.update(overrides)
    return GrammarEntry(**fields)


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Signals need a core application instance."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def local_store(tmp_path):
    store = LocalStore(tmp_path / "japaneasy.db")
    store.ensure_schema()
    yield store
    store.close()


@pytest.fixture
def session_context():
    return SessionContext(supabase_url="https://example.supabase.co", supabase_key="anon-key")


@pytest.fixture
def remote_store(session_context):
    return FakeRemoteStore(session_context)


@pytest.fixture
def signed_in(session_context):
    session_context.establish(Account(id="user-1", email="learner@example.com"))
    return session_context.account


@pytest.fixture
def inline_pool():
    return InlineThreadPool()
