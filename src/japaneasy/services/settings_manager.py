"""Settings Manager - Handles API keys, backend credentials and paths."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from japaneasy.core import DEFAULT_REMOTE_TIMEOUT, SessionContext

logger = logging.getLogger(__name__)


class SettingsManager:
    """
    Manages settings read from a .env file in the project root.

    Values already present in the process environment win over the file,
    except after reload_env(), which overrides them.
    """

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            project_root: Path to project root where .env is located.
                         If None, searches upward from current file.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        env_path = project_root / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = project_root

    @staticmethod
    def _get(name: str) -> Optional[str]:
        value = os.getenv(name)
        return value.strip() if value and value.strip() else None

    def get_gemini_api_key(self) -> Optional[str]:
        """Get the Gemini API key from environment."""
        return self._get("GEMINI_API_KEY")

    def get_supabase_url(self) -> Optional[str]:
        return self._get("SUPABASE_URL")

    def get_supabase_key(self) -> Optional[str]:
        return self._get("SUPABASE_ANON_KEY")

    def get_remote_timeout(self) -> float:
        """Seconds allowed per remote call; falls back to the default on bad input."""
        raw = self._get("JAPANEASY_REMOTE_TIMEOUT")
        if raw is None:
            return DEFAULT_REMOTE_TIMEOUT
        try:
            timeout = float(raw)
        except ValueError:
            logger.warning("Ignoring invalid JAPANEASY_REMOTE_TIMEOUT=%r", raw)
            return DEFAULT_REMOTE_TIMEOUT
        return timeout if timeout > 0 else DEFAULT_REMOTE_TIMEOUT

    def get_database_path(self) -> Path:
        raw = self._get("JAPANEASY_DB_PATH")
        if raw:
            return Path(raw).expanduser()
        return Path.home() / ".japaneasy" / "japaneasy.db"

    def get_export_dir(self) -> Path:
        raw = self._get("JAPANEASY_EXPORT_DIR")
        return Path(raw).expanduser() if raw else Path.cwd()

    def get_log_level(self) -> int:
        name = (self._get("JAPANEASY_LOG_LEVEL") or "INFO").upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.INFO

    def build_session_context(self) -> SessionContext:
        """Session context with backend credentials and no account yet."""
        return SessionContext(
            supabase_url=self.get_supabase_url(),
            supabase_key=self.get_supabase_key(),
            remote_timeout=self.get_remote_timeout(),
        )

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)
