"""
Route Dependencies

Outbound collaborators injected into route handlers via FastAPI's Depends,
plus body parsing for the rate-limited routes
"""

from typing import Optional, Type, TypeVar
import httpx
from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError
from tts_proxy.middleware.error_handler import jsonable_errors
from tts_proxy.services.audio_relay import AudioRelay
from tts_proxy.services.tts_client import TTSMP3Client

ModelT = TypeVar('ModelT', bound=BaseModel)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared outbound client, opened on startup"""
    http_client = getattr(request.app.state, 'http_client', None)
    if http_client is None:
        raise RuntimeError('HTTP client not initialized; application startup has not run')
    return http_client


def get_tts_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> TTSMP3Client:
    return TTSMP3Client(http_client)


def get_audio_relay(http_client: httpx.AsyncClient = Depends(get_http_client)) -> AudioRelay:
    return AudioRelay(http_client)


async def read_json_body(request: Request, model: Type[ModelT]) -> Optional[ModelT]:
    """
    Parse the JSON body into model from inside the handler.

    FastAPI validates declared body parameters before the slowapi decorator
    runs, which would let an over-quota caller get a 400 instead of a 429.

    Returns:
        None for an empty body
    Raises:
        HTTPException: 400 for malformed JSON or wrongly typed fields
    """
    raw = await request.body()
    if not raw.strip():
        return None

    try:
        return model.model_validate_json(raw)
    except ValidationError as error:
        raise HTTPException(
            status_code=400,
            detail={
                'error': 'Invalid request body.',
                'details': jsonable_errors(error)
            }
        )
