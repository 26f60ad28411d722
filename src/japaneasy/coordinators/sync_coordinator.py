"""Sync Coordinator - reconciles the local store with the account's cloud copy."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from enum import Enum
from typing import List, Optional

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from japaneasy.core import (
    Collection,
    ConfigurationError,
    LibrarySnapshot,
    is_configuration_error,
)
from japaneasy.io import LocalStore, RemoteStore
from japaneasy.services.api_workers import SyncWorker

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    SYNCING = "syncing"


class SyncOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    BUSY = "busy"
    NO_ACCOUNT = "no_account"


class SyncCoordinator(QObject):
    """Orchestrates push-then-pull reconciliation between both stores.

    A run pushes every local entry, pulls the account's full remote copy,
    and merges it into the local store by id. The local store only grows or
    updates as a result; nothing is deleted by sync.

    At most one run is active. Calls that arrive while a run is in progress
    are dropped, not queued.
    """

    sync_started = Signal()
    # Pulled snapshot, which becomes the new working view
    sync_completed = Signal(object)
    sync_failed = Signal(str)
    configuration_error = Signal(str)

    CONFIGURATION_ALERT_TITLE = "Cloud Sync Configuration"

    def __init__(
        self,
        local_store: LocalStore,
        remote_store: RemoteStore,
        notifier=None,
        thread_pool: Optional[QThreadPool] = None,
        max_push_workers: int = 8,
    ) -> None:
        super().__init__()

        if local_store is None:
            raise ValueError("LocalStore must not be None")
        if remote_store is None:
            raise ValueError("RemoteStore must not be None")

        self._local = local_store
        self._remote = remote_store
        self._notifier = notifier
        self._thread_pool = thread_pool
        self._max_push_workers = max(1, max_push_workers)

        self._guard = threading.Lock()
        self._state = SyncState.IDLE
        self.working_view: Optional[LibrarySnapshot] = None
        self.last_synced_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

        # Queued onto the coordinator's thread when a pool worker fails the run
        self.configuration_error.connect(self.show_configuration_alert)

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_syncing(self) -> bool:
        return self._state is SyncState.SYNCING

    @Slot(object)
    def handle_session_established(self, account=None) -> None:
        """Automatic trigger: an account session just became active."""
        logger.info("Session established; scheduling sync")
        self._schedule()

    @Slot()
    def request_sync(self) -> None:
        """Explicit user-initiated trigger."""
        self._schedule()

    def _schedule(self) -> None:
        if self.is_syncing:
            logger.info("Sync already running; request dropped")
            return
        pool = self._thread_pool or QThreadPool.globalInstance()
        pool.start(SyncWorker(self.synchronize))

    def synchronize(self) -> SyncOutcome:
        """Run one reconciliation pass on the calling thread."""
        if not self._guard.acquire(blocking=False):
            logger.info("Sync already running; request dropped")
            return SyncOutcome.BUSY
        try:
            self._state = SyncState.SYNCING
            return self._run()
        finally:
            self._state = SyncState.IDLE
            self._guard.release()

    def _run(self) -> SyncOutcome:
        account_id = self._remote.current_user()
        if account_id is None or not self._remote.is_configured():
            logger.debug("No active account; skipping sync")
            return SyncOutcome.NO_ACCOUNT

        self.sync_started.emit()
        logger.info("Sync started for account %s", account_id)

        local = self._local.snapshot()
        try:
            self._push(local)
            pulled = LibrarySnapshot(
                vocabulary=self._remote.fetch_all(Collection.VOCABULARY),
                grammar=self._remote.fetch_all(Collection.GRAMMAR),
            )
            self._local.merge_snapshot(pulled)
        except Exception as exc:
            return self._handle_failure(exc)

        self.working_view = pulled
        self.last_synced_at = datetime.now()
        self.last_error = None
        logger.info(
            "Sync finished: pushed %d, pulled %d words and %d grammar points",
            len(local.vocabulary) + len(local.grammar),
            len(pulled.vocabulary),
            len(pulled.grammar),
        )
        self.sync_completed.emit(pulled)
        return SyncOutcome.COMPLETED

    def _push(self, local: LibrarySnapshot) -> None:
        """Upsert every local entry concurrently and wait for all of them."""
        jobs = [(Collection.VOCABULARY, entry) for entry in local.vocabulary]
        jobs += [(Collection.GRAMMAR, entry) for entry in local.grammar]
        if not jobs:
            return

        with ThreadPoolExecutor(
            max_workers=min(self._max_push_workers, len(jobs)),
            thread_name_prefix="sync-push",
        ) as executor:
            futures = [
                executor.submit(self._remote.upsert, collection, entry)
                for collection, entry in jobs
            ]
            wait(futures)

        errors: List[BaseException] = [f.exception() for f in futures if f.exception() is not None]
        if errors:
            logger.warning("%d of %d pushes failed", len(errors), len(jobs))
            config_errors = [e for e in errors if isinstance(e, ConfigurationError)]
            raise (config_errors or errors)[0]

    @Slot(str)
    def show_configuration_alert(self, message: str) -> None:
        if self._notifier is None:
            return
        self._notifier.show_error(
            self.CONFIGURATION_ALERT_TITLE,
            (
                "Cloud sync is not set up correctly. Check that the backend "
                f"tables and access policies exist.\n\n{message}"
            ),
        )

    def _handle_failure(self, exc: BaseException) -> SyncOutcome:
        message = str(exc)
        self.last_error = message
        if isinstance(exc, ConfigurationError) or is_configuration_error(message):
            logger.error("Sync blocked by backend configuration: %s", message)
            self.configuration_error.emit(message)
        else:
            logger.warning("Sync failed, will retry on next trigger: %s", message, exc_info=exc)
        self.sync_failed.emit(message)
        return SyncOutcome.FAILED
