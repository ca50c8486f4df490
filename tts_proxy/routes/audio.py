"""
Audio Routes

Audio download proxy so the browser can fetch TTSMP3 files without CORS errors
"""

from typing import Optional
import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response, StreamingResponse
from pydantic import BaseModel
from tts_proxy.config import settings
from tts_proxy.dependencies import get_audio_relay, read_json_body
from tts_proxy.middleware.rate_limiter import api_limiter
from tts_proxy.services.audio_relay import AudioFetchError, AudioRelay
from tts_proxy.services.logger import logger

router = APIRouter()


class DownloadAudioRequest(BaseModel):
    audioUrl: Optional[str] = None


def _download_failed(request: Request, audio_url: str, error: Exception) -> HTTPException:
    logger.error(
        f'Audio download proxy error: {str(error)}',
        requestId=getattr(request.state, 'request_id', None),
        url=audio_url,
        error=str(error)
    )
    return HTTPException(
        status_code=500,
        detail={
            'error': 'Failed to download audio via proxy.',
            'details': str(error) or error.__class__.__name__,
            'url': audio_url
        }
    )


@router.post('/download-audio')
@api_limiter
async def download_audio(
    request: Request,
    relay: AudioRelay = Depends(get_audio_relay)
):
    """
    Download an audio file and relay it to the client
    Accepts: { audioUrl }
    Returns: the audio bytes with content-type, content-length and content-disposition
    """
    body = await read_json_body(request, DownloadAudioRequest)
    audio_url = body.audioUrl if body else None

    if not audio_url:
        raise HTTPException(status_code=400, detail={'error': 'audioUrl is required.'})

    # Any URL is fetched, not only TTSMP3 ones
    try:
        audio = await relay.open(audio_url)
    except (AudioFetchError, httpx.HTTPError, httpx.InvalidURL) as error:
        raise _download_failed(request, audio_url, error)

    if settings.RELAY_MODE == 'buffer':
        try:
            content = await audio.read()
        except httpx.HTTPError as error:
            raise _download_failed(request, audio_url, error)

        headers = {key: value for key, value in audio.headers.items() if key != 'Content-Length'}
        return Response(content=content, media_type=audio.media_type, headers=headers)

    # Nothing has reached the client until the first chunk is in hand
    try:
        await audio.first_chunk()
    except httpx.HTTPError as error:
        raise _download_failed(request, audio_url, error)

    # Headers go out with the first chunk; later failures can only cut the connection
    return StreamingResponse(
        audio.iter_bytes(),
        media_type=audio.media_type,
        headers=audio.headers
    )
