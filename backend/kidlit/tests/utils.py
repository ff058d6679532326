import uuid
from collections.abc import Callable

import httpx

from kidlit.core.config import Settings
from kidlit.core.exceptions import IdentityStoreError
from kidlit.core.identity import IdentityStore


class FakeIdentityStore(IdentityStore):
    """In-memory accounts and tables with switchable failures."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.tables: dict[str, list[dict]] = {}
        self.insert_error: str | None = None
        self.delete_error: str | None = None
        # Raised as-is, for failures the store does not translate.
        self.insert_exception: Exception | None = None
        self.return_no_user = False

    def create_user(self, *, email, password, email_confirm=True, user_metadata=None):
        if any(user["email"] == email for user in self.users.values()):
            raise IdentityStoreError(
                "A user with this email address has already been registered"
            )
        if self.return_no_user:
            return None
        user_id = str(uuid.uuid4())
        self.users[user_id] = {
            "email": email,
            "password": password,
            "email_confirm": email_confirm,
            "user_metadata": user_metadata or {},
        }
        return user_id

    def insert_row(self, table, record):
        if self.insert_exception is not None:
            raise self.insert_exception
        if self.insert_error:
            raise IdentityStoreError(self.insert_error)
        self.tables.setdefault(table, []).append(dict(record))

    def delete_user(self, user_id):
        if self.delete_error:
            raise IdentityStoreError(self.delete_error)
        self.users.pop(user_id, None)

    def rows(self, table: str = "profiles") -> list[dict]:
        return self.tables.get(table, [])


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays one response."""

    def __init__(self, response: Callable[[httpx.Request], httpx.Response] | httpx.Response):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self.response):
            return self.response(request)
        return self.response


def gemini_payload(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "GEMINI_API_KEY": "test-key",
        "SUPABASE_URL": None,
        "SUPABASE_SERVICE_ROLE_KEY": None,
        "CORS_ORIGIN": "",
        "ENVIRONMENT": "development",
        "CLIENT_DIST_DIR": tmp_path / "client-dist",
        "PRODUCTION_DIST_DIR": tmp_path / "dist",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
