"""Main entry point for the Japaneasy study backend."""

import logging
import sys
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QCoreApplication

from japaneasy.coordinators import StudyController, SyncCoordinator
from japaneasy.core import SessionContext
from japaneasy.io import LocalStore, SupabaseRemoteStore
from japaneasy.logging_config import setup_logging
from japaneasy.services import (
    GeminiAnalysisService,
    GeminiPronunciationService,
    SettingsManager,
    VocabularyService,
)

logger = logging.getLogger(__name__)


class LogNotifier:
    """Stand-in for a view's alert dialog when running headless."""

    def show_error(self, title: str, message: str) -> None:
        logger.error("%s: %s", title, message)

    def show_info(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)


@dataclass
class Application:
    context: SessionContext
    local_store: LocalStore
    remote_store: SupabaseRemoteStore
    sync_coordinator: SyncCoordinator
    controller: StudyController


def build_application(settings: SettingsManager, notifier=None) -> Application:
    """
    Instantiate and wire all components following the Composition Root pattern.
    This is the only place that knows how the pieces fit together.
    """
    notifier = notifier or LogNotifier()

    # 1. Infrastructure
    context = settings.build_session_context()
    local_store = LocalStore(settings.get_database_path())
    local_store.ensure_schema()
    remote_store = SupabaseRemoteStore(context)

    # 2. Coordinators (Dependency Injection)
    sync_coordinator = SyncCoordinator(
        local_store=local_store,
        remote_store=remote_store,
        notifier=notifier,
    )
    controller = StudyController(
        local_store=local_store,
        remote_store=remote_store,
        vocabulary_service=VocabularyService(),
        analysis_service=GeminiAnalysisService(),
        settings_manager=settings,
        pronunciation_service=GeminiPronunciationService(),
        notifier=notifier,
    )

    # 3. Signal wiring
    controller.session_established.connect(sync_coordinator.handle_session_established)
    sync_coordinator.sync_completed.connect(controller.handle_sync_completed)

    return Application(
        context=context,
        local_store=local_store,
        remote_store=remote_store,
        sync_coordinator=sync_coordinator,
        controller=controller,
    )


def main(argv: Optional[list] = None) -> int:
    """Load the local library and, when a session exists, reconcile it once."""
    app = QCoreApplication(argv if argv is not None else sys.argv)
    app.setApplicationName("Japaneasy")
    app.setOrganizationName("Japaneasy")

    settings = SettingsManager()
    setup_logging(settings.get_log_level())
    components = build_application(settings)

    library = components.controller.load_local()
    logger.info(
        "Local library: %d words, %d grammar points",
        len(library.vocabulary),
        len(library.grammar),
    )

    if components.remote_store.is_configured() and components.remote_store.restore_session():
        outcome = components.sync_coordinator.synchronize()
        logger.info("Sync outcome: %s", outcome.value)

    components.local_store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
