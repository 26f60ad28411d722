"""I/O layer - local persistence and the hosted backend adapter."""

from .local_store import LocalStore
from .remote_store import RemoteStore, SupabaseRemoteStore

__all__ = ["LocalStore", "RemoteStore", "SupabaseRemoteStore"]
