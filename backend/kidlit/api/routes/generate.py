import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from kidlit.api.deps import LLMClientDep, SettingsDep
from kidlit.core.exceptions import (
    ProviderAPIError,
    ProviderDecodeError,
    ProviderUnavailableError,
)
from kidlit.models import GenerateContentRequest

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/generate-content")
async def generate_content(
    settings: SettingsDep,
    llm: LLMClientDep,
    request_in: GenerateContentRequest | None = None,
) -> Any:
    """Forward ``content`` to Gemini as a single prompt and relay the raw payload."""
    if request_in is None or not request_in.content:
        raise HTTPException(status_code=400, detail="Content is required")

    if not settings.GEMINI_API_KEY:
        logger.error("GEMINI_API_KEY is not set")
        raise HTTPException(status_code=500, detail="Server configuration error")

    try:
        return await llm.generate(request_in.content)
    except ProviderDecodeError as e:
        raise HTTPException(
            status_code=500,
            detail={"error": "Invalid response from Gemini API", "details": e.raw_body},
        ) from e
    except ProviderAPIError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": "Error from Gemini API", "details": e.payload},
        ) from e
    except ProviderUnavailableError as e:
        logger.error("Gemini API unreachable: %s", e)
        status_code = 504 if e.timed_out else 502
        raise HTTPException(status_code=status_code, detail="Gemini API unavailable") from e
