"""Study Controller - application state the views bind to.

Holds the working view of both collections and applies user actions to it.
Every mutation is written to the local store first; when an account is
signed in, a best-effort copy is then sent to the hosted store in the
background. Mirror failures are reported on ``mirror_failed`` and never
undo or block the local change.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from japaneasy.core import (
    Account,
    AuthError,
    Collection,
    GrammarEntry,
    LibrarySnapshot,
    MasteryLevel,
    VocabularyEntry,
)
from japaneasy.io import LocalStore, RemoteStore
from japaneasy.services import SettingsManager, VocabularyService
from japaneasy.services.analysis import AnalysisResult, AnalysisService
from japaneasy.services.api_workers import AnalysisWorker, RemoteMirrorWorker
from japaneasy.services.pronunciation import PronunciationResult, PronunciationService

logger = logging.getLogger(__name__)


class StudyController(QObject):
    """Owns the in-memory library and routes user actions to the stores."""

    library_changed = Signal(object)  # LibrarySnapshot
    analysis_completed = Signal(object)  # AnalysisResult
    analysis_failed = Signal(str)
    mirror_failed = Signal(str)
    session_established = Signal(object)  # Account
    session_ended = Signal()

    def __init__(
        self,
        local_store: LocalStore,
        remote_store: RemoteStore,
        vocabulary_service: VocabularyService,
        analysis_service: AnalysisService,
        settings_manager: SettingsManager,
        pronunciation_service: Optional[PronunciationService] = None,
        notifier=None,
        thread_pool: Optional[QThreadPool] = None,
    ):
        super().__init__()

        if local_store is None:
            raise ValueError("LocalStore must not be None")
        if remote_store is None:
            raise ValueError("RemoteStore must not be None")
        if vocabulary_service is None:
            raise ValueError("VocabularyService must not be None")
        if analysis_service is None:
            raise ValueError("AnalysisService must not be None")
        if settings_manager is None:
            raise ValueError("SettingsManager must not be None")

        self.local_store = local_store
        self.remote_store = remote_store
        self.vocabulary_service = vocabulary_service
        self.analysis_service = analysis_service
        self.settings_manager = settings_manager
        self.pronunciation_service = pronunciation_service
        self.notifier = notifier
        self.thread_pool = thread_pool or QThreadPool.globalInstance()

        self.library = LibrarySnapshot()
        self.last_analysis: Optional[AnalysisResult] = None

    # ------------------------------------------------------------------
    # Working view
    # ------------------------------------------------------------------

    @property
    def words(self) -> List[VocabularyEntry]:
        return self.library.vocabulary

    @property
    def grammar(self) -> List[GrammarEntry]:
        return self.library.grammar

    def load_local(self) -> LibrarySnapshot:
        """Populate the working view from the local store."""
        self.library = self.local_store.snapshot()
        self.library_changed.emit(self.library)
        return self.library

    @Slot(object)
    def handle_sync_completed(self, snapshot: LibrarySnapshot) -> None:
        """Replace the working view with the freshly pulled snapshot."""
        self.library = snapshot
        self.library_changed.emit(self.library)

    # ------------------------------------------------------------------
    # Image analysis
    # ------------------------------------------------------------------

    def import_image(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> AnalysisResult:
        """Analyze an image on the calling thread and store the new entries."""
        api_key = self.settings_manager.get_gemini_api_key()
        if api_key is None:
            result = AnalysisResult(error="Gemini API key is not configured")
        else:
            result = self.analysis_service.analyze(image_bytes, mime_type, api_key)
        self.handle_analysis_result(result)
        return result

    def start_import(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> None:
        """Analyze an image in the background; results arrive via signals."""
        api_key = self.settings_manager.get_gemini_api_key()
        if api_key is None:
            self.handle_analysis_result(AnalysisResult(error="Gemini API key is not configured"))
            return
        worker = AnalysisWorker(self.analysis_service, image_bytes, mime_type, api_key)
        worker.signals.analysis_result.connect(self.handle_analysis_result)
        worker.signals.error.connect(self.analysis_failed)
        self.thread_pool.start(worker)

    @Slot(object)
    def handle_analysis_result(self, result: AnalysisResult) -> None:
        if not result.is_success():
            logger.warning("Analysis failed: %s", result.error)
            self.analysis_failed.emit(result.error)
            if self.notifier is not None:
                self.notifier.show_error("Analysis Failed", result.error)
            return

        words, grammar = self.vocabulary_service.create_entries(result)
        self.local_store.bulk_upsert(Collection.VOCABULARY, words)
        self.local_store.bulk_upsert(Collection.GRAMMAR, grammar)
        self.last_analysis = result
        self.load_local()

        for word in words:
            self._mirror_upsert(Collection.VOCABULARY, word)
        for entry in grammar:
            self._mirror_upsert(Collection.GRAMMAR, entry)
        self.analysis_completed.emit(result)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def toggle_save_word(self, word_id: str) -> None:
        word = self.local_store.get(Collection.VOCABULARY, word_id)
        if word is None:
            return
        self._update(Collection.VOCABULARY, word_id, is_saved=not word.is_saved)

    def update_mastery(self, word_id: str, level: MasteryLevel) -> None:
        self._update(Collection.VOCABULARY, word_id, mastery_level=MasteryLevel(level))

    def set_grammar_rating(self, grammar_id: str, rating: int) -> None:
        if not 0 <= rating <= GrammarEntry.MAX_RATING:
            raise ValueError(f"Rating must be between 0 and {GrammarEntry.MAX_RATING}")
        self._update(Collection.GRAMMAR, grammar_id, rating=rating)

    def toggle_grammar_bookmark(self, grammar_id: str) -> None:
        entry = self.local_store.get(Collection.GRAMMAR, grammar_id)
        if entry is None:
            return
        self._update(Collection.GRAMMAR, grammar_id, rating=0 if entry.is_bookmarked else 1)

    def delete_word(self, word_id: str) -> None:
        self._delete(Collection.VOCABULARY, word_id)

    def delete_grammar(self, grammar_id: str) -> None:
        self._delete(Collection.GRAMMAR, grammar_id)

    def export_backup(self, directory: Optional[Path] = None) -> Path:
        return self.local_store.write_export(directory or self.settings_manager.get_export_dir())

    def pronounce(self, text: str) -> Optional[PronunciationResult]:
        api_key = self.settings_manager.get_gemini_api_key()
        if self.pronunciation_service is None or api_key is None:
            return None
        result = self.pronunciation_service.synthesize(text, api_key)
        if not result.is_success():
            logger.warning("Pronunciation unavailable: %s", result.error)
        return result

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def is_cloud_configured(self) -> bool:
        return self.remote_store.is_configured()

    @property
    def is_signed_in(self) -> bool:
        return self.remote_store.current_user() is not None

    def sign_in(self, email: str, password: str) -> Optional[Account]:
        try:
            account = self.remote_store.sign_in(email, password)
        except AuthError as exc:
            logger.warning("Sign in failed: %s", exc)
            if self.notifier is not None:
                self.notifier.show_error("Sign In Failed", str(exc))
            return None
        self.session_established.emit(account)
        return account

    def sign_out(self) -> None:
        """End the session. Local data stays on the device."""
        self.remote_store.sign_out()
        self.session_ended.emit()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _update(self, collection: Collection, entry_id: str, **fields) -> None:
        if not self.local_store.update(collection, entry_id, fields):
            return
        self.load_local()
        entry = self.local_store.get(collection, entry_id)
        if entry is not None:
            self._mirror_upsert(collection, entry)

    def _delete(self, collection: Collection, entry_id: str) -> None:
        self.local_store.delete(collection, entry_id)
        self.load_local()
        self._mirror(
            f"delete {collection.value} {entry_id}",
            lambda: self.remote_store.delete(collection, entry_id),
        )

    def _mirror_upsert(self, collection: Collection, entry) -> None:
        self._mirror(
            f"upsert {collection.value} {entry.id}",
            lambda: self.remote_store.upsert(collection, entry),
        )

    def _mirror(self, description: str, action: Callable[[], None]) -> None:
        if not self.is_cloud_configured or not self.is_signed_in:
            return
        worker = RemoteMirrorWorker(description, action)
        worker.signals.error.connect(self.mirror_failed)
        self.thread_pool.start(worker)
