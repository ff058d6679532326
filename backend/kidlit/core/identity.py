import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from supabase import AuthError, Client, ClientOptions, PostgrestAPIError, create_client

from kidlit.core.config import Settings
from kidlit.core.exceptions import IdentityStoreError

logger = logging.getLogger(__name__)


class IdentityStore(ABC):
    """Account creation plus a records table, owned by an external service."""

    @abstractmethod
    def create_user(
        self,
        *,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: dict[str, Any] | None = None,
    ) -> str | None:
        """Create an account and return its id, or None if the service gave none back."""

    @abstractmethod
    def insert_row(self, table: str, record: dict[str, Any]) -> None:
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> None:
        pass


def _error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)


class SupabaseIdentityStore(IdentityStore):
    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseIdentityStore":
        client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )
        return cls(client)

    def create_user(
        self,
        *,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: dict[str, Any] | None = None,
    ) -> str | None:
        try:
            response = self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": email_confirm,
                    "user_metadata": user_metadata or {},
                }
            )
        except (AuthError, httpx.HTTPError) as e:
            raise IdentityStoreError(_error_message(e)) from e

        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            return None
        return str(user.id)

    def insert_row(self, table: str, record: dict[str, Any]) -> None:
        try:
            self.client.table(table).insert(record).execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            raise IdentityStoreError(_error_message(e)) from e

    def delete_user(self, user_id: str) -> None:
        try:
            self.client.auth.admin.delete_user(user_id)
        except (AuthError, httpx.HTTPError) as e:
            raise IdentityStoreError(_error_message(e)) from e


def build_identity_store(settings: Settings) -> IdentityStore | None:
    if not settings.identity_store_configured:
        logger.warning(
            "Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY; student registration is disabled."
        )
        return None
    try:
        return SupabaseIdentityStore.from_settings(settings)
    except Exception:
        logger.exception("Could not initialise the Supabase client")
        return None
