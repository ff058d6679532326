from typing import Annotated

from fastapi import Depends, Request

from kidlit.assistant.llm_client import GeminiClient
from kidlit.core.config import Settings
from kidlit.core.identity import IdentityStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_llm_client(settings: SettingsDep) -> GeminiClient:
    return GeminiClient.from_settings(settings)


LLMClientDep = Annotated[GeminiClient, Depends(get_llm_client)]


def get_identity_store(request: Request) -> IdentityStore | None:
    """The configured store, or None when Supabase credentials are missing."""
    return request.app.state.identity_store


IdentityStoreDep = Annotated[IdentityStore | None, Depends(get_identity_store)]
