"""Coordinators - Orchestration layer connecting views with stores and services."""

from .study_controller import StudyController
from .sync_coordinator import SyncCoordinator, SyncOutcome, SyncState

__all__ = [
    "StudyController",
    "SyncCoordinator",
    "SyncOutcome",
    "SyncState",
]
