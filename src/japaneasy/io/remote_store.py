"""Remote store adapter - per-account mirror of both collections in Supabase."""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from japaneasy.core import (
    Account,
    AuthError,
    Collection,
    RemoteError,
    SessionContext,
    classify_remote_error,
)
from japaneasy.io.remote_schema import (
    ORDER_COLUMN,
    OWNER_COLUMN,
    REMOTE_TABLES,
    entry_to_row,
    row_to_entry,
)

logger = logging.getLogger(__name__)


class RemoteStore(ABC):
    """Contract the sync coordinator relies on.

    Every operation is scoped to the account held by the session context.
    Writes without an account are silently skipped; reads raise AuthError.
    """

    def __init__(self, context: SessionContext) -> None:
        if context is None:
            raise ValueError("SessionContext must not be None")
        self.context = context

    def is_configured(self) -> bool:
        """True iff endpoint and key are present. Does not check reachability."""
        return self.context.is_configured

    def current_user(self) -> Optional[str]:
        return self.context.account_id

    def sign_in(self, email: str, password: str) -> Account:
        raise NotImplementedError(f"{type(self).__name__} does not support sign in")

    def sign_out(self) -> None:
        self.context.clear()

    @abstractmethod
    def fetch_all(self, collection: Collection) -> List[Any]:
        """Return all entries of the current account, newest first.

        Raises:
            AuthError: If no account is signed in.
            RemoteError: On backend or network failure.
        """

    @abstractmethod
    def upsert(self, collection: Collection, entry) -> None:
        """Write the full record keyed by its id. No-op without an account."""

    @abstractmethod
    def delete(self, collection: Collection, entry_id: str) -> None:
        """Remove the record scoped to (id, account). No-op without an account."""


class SupabaseRemoteStore(RemoteStore):
    """RemoteStore backed by a hosted Supabase project."""

    def __init__(self, context: SessionContext, client: Optional[Client] = None) -> None:
        super().__init__(context)
        self._client = client

    @property
    def client(self) -> Client:
        """Create the Supabase client on first use."""
        if self._client is None:
            if not self.is_configured():
                raise RemoteError("Supabase URL and key are not configured")
            options = ClientOptions(postgrest_client_timeout=self.context.remote_timeout)
            self._client = create_client(
                self.context.supabase_url.strip(),
                self.context.supabase_key.strip(),
                options=options,
            )
        return self._client

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def sign_in(self, email: str, password: str) -> Account:
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            raise AuthError(f"Sign in failed: {exc}") from exc
        if response.user is None:
            raise AuthError("Sign in returned no user")
        account = Account(id=response.user.id, email=response.user.email or email)
        self.context.establish(account)
        logger.info("Signed in as %s", account.email)
        return account

    def sign_up(self, email: str, password: str) -> Optional[Account]:
        """Register an account. Returns None while email confirmation is pending."""
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as exc:
            raise AuthError(f"Sign up failed: {exc}") from exc
        if response.user is None or response.session is None:
            logger.info("Sign up for %s awaits confirmation", email)
            return None
        account = Account(id=response.user.id, email=response.user.email or email)
        self.context.establish(account)
        return account

    def restore_session(self) -> Optional[Account]:
        """Pick up a persisted session, if the auth library holds one."""
        if not self.is_configured():
            return None
        try:
            response = self.client.auth.get_user()
        except Exception as exc:
            logger.warning("Could not restore session: %s", exc)
            return None
        if response is None or response.user is None:
            return None
        account = Account(id=response.user.id, email=response.user.email or "")
        self.context.establish(account)
        return account

    def sign_out(self) -> None:
        try:
            if self._client is not None:
                self._client.auth.sign_out()
        except Exception as exc:
            logger.warning("Remote sign out failed: %s", exc)
        finally:
            self.context.clear()

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def fetch_all(self, collection: Collection) -> List[Any]:
        user_id = self.current_user()
        if user_id is None:
            raise AuthError(f"Cannot fetch {collection.value} without an account")
        table = REMOTE_TABLES[collection]
        try:
            response = (
                self.client.table(table)
                .select("*")
                .eq(OWNER_COLUMN, user_id)
                .order(ORDER_COLUMN, desc=True)
                .execute()
            )
        except Exception as exc:
            raise self._wrap(exc, f"fetch {table}") from exc
        return [row_to_entry(collection, row) for row in (response.data or [])]

    def upsert(self, collection: Collection, entry) -> None:
        user_id = self.current_user()
        if user_id is None:
            return
        table = REMOTE_TABLES[collection]
        try:
            self.client.table(table).upsert(entry_to_row(collection, entry, user_id)).execute()
        except Exception as exc:
            raise self._wrap(exc, f"upsert {table} {entry.id}") from exc

    def delete(self, collection: Collection, entry_id: str) -> None:
        user_id = self.current_user()
        if user_id is None:
            return
        table = REMOTE_TABLES[collection]
        try:
            (
                self.client.table(table)
                .delete()
                .eq("id", entry_id)
                .eq(OWNER_COLUMN, user_id)
                .execute()
            )
        except Exception as exc:
            raise self._wrap(exc, f"delete {table} {entry_id}") from exc

    @staticmethod
    def _wrap(exc: Exception, action: str) -> RemoteError:
        if isinstance(exc, APIError):
            detail = f"{exc.code}: {exc.message}" if exc.code else str(exc.message)
        else:
            detail = str(exc)
        return classify_remote_error(RemoteError(f"Failed to {action}: {detail}"))
