"""
TTS Routes

Text-to-speech endpoint backed by TTSMP3
"""

from typing import Optional
import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import AliasChoices, BaseModel, Field
from tts_proxy.dependencies import get_tts_client, read_json_body
from tts_proxy.middleware.rate_limiter import api_limiter
from tts_proxy.services.tts_client import TTSMP3Client, TTSProviderError
from tts_proxy.services.logger import logger

router = APIRouter()


class TTSRequest(BaseModel):
    text: Optional[str] = None
    # The frontend sends 'voiceName'
    voice: Optional[str] = Field(default=None, validation_alias=AliasChoices('voice', 'voiceName'))


@router.post('/tts')
@api_limiter
async def text_to_speech(
    request: Request,
    tts_client: TTSMP3Client = Depends(get_tts_client)
):
    """
    Generate speech from text
    Accepts: { text, voice }
    Returns: { audioUrl, speaker, cached }
    """
    body = await read_json_body(request, TTSRequest)
    text = body.text if body else None
    voice = body.voice if body else None

    if not text or not voice:
        raise HTTPException(
            status_code=400,
            detail={'error': 'Text and voice are required.'}
        )

    try:
        result = await tts_client.synthesize(text, voice)
    except TTSProviderError as error:
        logger.error(
            f'TTS proxy error: {str(error)}',
            requestId=getattr(request.state, 'request_id', None),
            voice=voice,
            providerStatus=error.status_code
        )
        raise HTTPException(
            status_code=500,
            detail={
                'error': 'Failed to generate audio via proxy.',
                'details': str(error),
                'voice': voice,
                'providerResponse': error.provider_response
            }
        )
    except httpx.HTTPError as error:
        logger.error(
            f'TTS proxy error: {str(error)}',
            requestId=getattr(request.state, 'request_id', None),
            voice=voice
        )
        raise HTTPException(
            status_code=500,
            detail={
                'error': 'Failed to generate audio via proxy.',
                'details': str(error) or error.__class__.__name__,
                'voice': voice
            }
        )

    return result.to_response()
