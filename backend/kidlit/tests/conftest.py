import httpx
import pytest
from fastapi.testclient import TestClient

from kidlit.api.deps import get_llm_client
from kidlit.assistant.llm_client import GeminiClient
from kidlit.core.config import Settings
from kidlit.main import create_app
from kidlit.tests.utils import (
    FakeIdentityStore,
    RecordingHandler,
    gemini_payload,
    make_settings,
)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def identity_store() -> FakeIdentityStore:
    return FakeIdentityStore()


@pytest.fixture
def gemini_handler() -> RecordingHandler:
    return RecordingHandler(httpx.Response(200, json=gemini_payload("Try 'Matilda'!")))


@pytest.fixture
def app(settings, identity_store, gemini_handler):
    application = create_app(settings)
    application.state.identity_store = identity_store
    application.dependency_overrides[get_llm_client] = lambda: GeminiClient.from_settings(
        settings, transport=httpx.MockTransport(gemini_handler)
    )
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client
