"""Background workers for non-blocking remote and AI calls using Qt threading."""

import logging
from typing import Callable

from PySide6.QtCore import QObject, QRunnable, Signal, Slot

from japaneasy.services.analysis import AnalysisService

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    """
    Signals for communicating results from worker threads.

    QRunnable doesn't inherit from QObject, so we need a separate
    QObject to hold the signals.
    """
    finished = Signal()
    error = Signal(str)
    analysis_result = Signal(object)  # AnalysisResult
    sync_result = Signal(object)  # SyncOutcome


class RemoteMirrorWorker(QRunnable):
    """
    Best-effort mirror of one local mutation to the hosted store.

    Failures never propagate; they are logged and emitted on ``error`` so a
    view may show them without blocking the user.
    """

    def __init__(self, description: str, action: Callable[[], None]):
        super().__init__()
        self.description = description
        self.action = action
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        try:
            self.action()
        except Exception as e:
            logger.warning("Remote mirror failed (%s): %s", self.description, e)
            self.signals.error.emit(f"{self.description}: {e}")
        finally:
            self.signals.finished.emit()


class SyncWorker(QRunnable):
    """Runs one reconciliation pass off the UI thread."""

    def __init__(self, synchronize: Callable[[], object]):
        super().__init__()
        self.synchronize = synchronize
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        try:
            outcome = self.synchronize()
            self.signals.sync_result.emit(outcome)
        except Exception as e:
            logger.exception("Unexpected sync error")
            self.signals.error.emit(f"Unexpected sync error: {e}")
        finally:
            self.signals.finished.emit()


class AnalysisWorker(QRunnable):
    """Runs an image analysis call in a background thread."""

    def __init__(
        self,
        analysis_service: AnalysisService,
        image_bytes: bytes,
        mime_type: str,
        api_key: str,
    ):
        super().__init__()
        self.analysis_service = analysis_service
        self.image_bytes = image_bytes
        self.mime_type = mime_type
        self.api_key = api_key
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        try:
            result = self.analysis_service.analyze(
                image_bytes=self.image_bytes,
                mime_type=self.mime_type,
                api_key=self.api_key,
            )
            self.signals.analysis_result.emit(result)
        except Exception as e:
            # Catch any unexpected exceptions not handled by service
            self.signals.error.emit(f"Unexpected analysis error: {e}")
        finally:
            self.signals.finished.emit()
