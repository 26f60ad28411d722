"""Explicit session and backend configuration shared by sync components."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_REMOTE_TIMEOUT = 10.0


@dataclass(frozen=True)
class Account:
    id: str
    email: str = ""


@dataclass
class SessionContext:
    """Backend credentials plus the signed-in account, if any.

    Passed to the remote store and the sync coordinator instead of living in
    module globals, so tests can swap in a fake session.
    """

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT
    account: Optional[Account] = None

    @property
    def is_configured(self) -> bool:
        return bool((self.supabase_url or "").strip()) and bool((self.supabase_key or "").strip())

    @property
    def account_id(self) -> Optional[str]:
        return self.account.id if self.account else None

    def establish(self, account: Account) -> None:
        self.account = account

    def clear(self) -> None:
        self.account = None
