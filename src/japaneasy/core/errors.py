"""Error taxonomy for storage, sync and AI gateway failures."""

from typing import Optional


class JapaneasyError(Exception):
    """Base class for all application errors."""


class AuthError(JapaneasyError):
    """An operation needed an active account and none was signed in."""


class RemoteError(JapaneasyError):
    """Network or backend failure while talking to the hosted store."""


class ConfigurationError(RemoteError):
    """The hosted backend is missing tables or access policies."""


class LocalStoreError(JapaneasyError):
    """The on-device database rejected a write."""


class AnalysisError(JapaneasyError):
    """The AI gateway returned something that is not a usable analysis."""


# Substrings reported by the backend when its schema or row-level security is
# not set up for this app.
CONFIGURATION_ERROR_MARKERS = (
    "policy",
    "relation",
    "does not exist",
    "permission denied",
    "42p01",
    "42501",
    "pgrst205",
)


def is_configuration_error(message: Optional[str]) -> bool:
    """Return True when an error message looks like backend misconfiguration."""
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in CONFIGURATION_ERROR_MARKERS)


def classify_remote_error(exc: Exception) -> RemoteError:
    """Promote a remote failure to ConfigurationError when its message matches."""
    if isinstance(exc, ConfigurationError):
        return exc
    message = str(exc)
    if is_configuration_error(message):
        return ConfigurationError(message)
    if isinstance(exc, RemoteError):
        return exc
    return RemoteError(message)
