"""
TTSMP3 Client Service

Forwards synthesis requests to the TTSMP3 API and returns the generated audio URL
"""

import httpx
from dataclasses import dataclass
from typing import Any, Dict, Optional
from tts_proxy.config import settings
from tts_proxy.services.logger import logger


class TTSProviderError(Exception):
    """TTSMP3 was unreachable or did not produce an audio URL"""

    def __init__(self, message: str, provider_response: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider_response = provider_response
        self.status_code = status_code


def is_success_code(error_code: Any) -> bool:
    """TTSMP3 signals success with Error: 0 (sometimes sent as '0'); booleans do not count"""
    if isinstance(error_code, bool):
        return False
    return error_code == 0 or error_code == '0'


@dataclass
class SynthesisResult:
    audio_url: str
    speaker: Optional[str] = None
    cached: int = 0

    def to_response(self) -> Dict[str, Any]:
        return {
            'audioUrl': self.audio_url,
            'speaker': self.speaker,
            'cached': self.cached
        }


class TTSMP3Client:
    """TTSMP3 API client"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_url: Optional[str] = None,
        source: Optional[str] = None,
        user_agent: Optional[str] = None
    ):
        self.http_client = http_client
        self.api_url = api_url or settings.TTS_API_URL
        self.source = source or settings.TTS_SOURCE
        self.user_agent = user_agent or settings.USER_AGENT

    async def synthesize(self, text: str, voice: str) -> SynthesisResult:
        """
        Generate speech for text with the given TTSMP3 voice

        Args:
            text: Text to synthesize
            voice: Voice name, passed through to TTSMP3 unchanged (e.g. 'Joanna')

        Returns:
            SynthesisResult with the provider's audio URL

        Raises:
            TTSProviderError: non-2xx status, unreadable body, or a non-zero provider error code
            httpx.HTTPError: the provider could not be reached
        """
        logger.info(
            f'Generating TTS for voice: {voice}, text length: {len(text)}',
            voice=voice,
            textLength=len(text)
        )

        # Field-only multipart form: (None, value) omits the filename
        response = await self.http_client.post(
            self.api_url,
            files={
                'msg': (None, text),
                'lang': (None, voice),
                'source': (None, self.source)
            },
            headers={'User-Agent': self.user_agent}
        )

        if not response.is_success:
            logger.error(
                f'TTSMP3 API responded with status: {response.status_code}',
                statusCode=response.status_code,
                responseText=response.text[:200]
            )
            raise TTSProviderError(
                f'TTSMP3 API responded with status: {response.status_code}',
                provider_response=response.text[:500],
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError:
            raise TTSProviderError(
                'TTSMP3 API returned a non-JSON response',
                provider_response=response.text[:500],
                status_code=response.status_code
            )

        logger.debug('TTSMP3 API response', response=data)

        if not isinstance(data, dict):
            raise TTSProviderError('TTSMP3 API returned an unexpected payload', provider_response=data)

        error_code = data.get('Error')
        if is_success_code(error_code) and data.get('URL'):
            return SynthesisResult(
                audio_url=data['URL'],
                speaker=data.get('Speaker') or voice,
                cached=data.get('Cached') or 0
            )

        logger.error('TTSMP3 API error', response=data)
        raise TTSProviderError(
            f"TTSMP3 API failed to generate audio. Error: {error_code or 'Unknown error'}",
            provider_response=data,
            status_code=response.status_code
        )
