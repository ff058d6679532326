from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import pytest
from supabase import AuthError, PostgrestAPIError

from kidlit.core.exceptions import IdentityStoreError
from kidlit.core.identity import SupabaseIdentityStore, build_identity_store
from kidlit.tests.utils import make_settings


class EmailExists(AuthError):
    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


def test_create_user_returns_account_id():
    client = MagicMock()
    client.auth.admin.create_user.return_value = SimpleNamespace(
        user=SimpleNamespace(id="0b9f3c1e-uuid")
    )
    store = SupabaseIdentityStore(client)

    user_id = store.create_user(
        email="kid@school.test",
        password="pw123456",
        user_metadata={"full_name": "Kid"},
    )

    assert user_id == "0b9f3c1e-uuid"
    client.auth.admin.create_user.assert_called_once_with(
        {
            "email": "kid@school.test",
            "password": "pw123456",
            "email_confirm": True,
            "user_metadata": {"full_name": "Kid"},
        }
    )


def test_create_user_without_user_in_response():
    client = MagicMock()
    client.auth.admin.create_user.return_value = SimpleNamespace(user=None)

    assert SupabaseIdentityStore(client).create_user(email="a@b.c", password="x") is None


def test_create_user_translates_auth_errors():
    client = MagicMock()
    client.auth.admin.create_user.side_effect = EmailExists(
        "A user with this email address has already been registered"
    )

    with pytest.raises(IdentityStoreError) as exc_info:
        SupabaseIdentityStore(client).create_user(email="a@b.c", password="x")

    assert exc_info.value.message == "A user with this email address has already been registered"


def test_insert_row_translates_postgrest_errors():
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.side_effect = PostgrestAPIError(
        {"message": 'duplicate key value violates unique constraint "profiles_pkey"', "code": "23505"}
    )

    with pytest.raises(IdentityStoreError) as exc_info:
        SupabaseIdentityStore(client).insert_row("profiles", {"id": "1"})

    assert "profiles_pkey" in exc_info.value.message
    client.table.assert_called_once_with("profiles")
    client.table.return_value.insert.assert_called_once_with({"id": "1"})


def test_insert_row_translates_transport_errors():
    client = MagicMock()
    client.table.return_value.insert.return_value.execute.side_effect = httpx.ConnectError(
        "Connection refused"
    )

    with pytest.raises(IdentityStoreError) as exc_info:
        SupabaseIdentityStore(client).insert_row("profiles", {"id": "1"})

    assert exc_info.value.message == "Connection refused"


def test_delete_user():
    client = MagicMock()

    SupabaseIdentityStore(client).delete_user("user-1")

    client.auth.admin.delete_user.assert_called_once_with("user-1")


def test_delete_user_translates_transport_errors():
    client = MagicMock()
    client.auth.admin.delete_user.side_effect = httpx.ReadTimeout("timed out")

    with pytest.raises(IdentityStoreError) as exc_info:
        SupabaseIdentityStore(client).delete_user("user-1")

    assert exc_info.value.message == "timed out"


def test_build_identity_store_without_configuration(tmp_path):
    assert build_identity_store(make_settings(tmp_path)) is None


def test_build_identity_store_with_configuration(tmp_path):
    settings = make_settings(
        tmp_path,
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="service-role-key",
    )

    with patch("kidlit.core.identity.create_client") as create_client:
        store = build_identity_store(settings)

    assert isinstance(store, SupabaseIdentityStore)
    assert store.client is create_client.return_value
    url, key = create_client.call_args.args
    assert (url, key) == ("https://project.supabase.co", "service-role-key")
