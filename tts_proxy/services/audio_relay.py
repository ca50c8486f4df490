"""
Audio Relay Service

Fetches a remote audio file and relays it to the client, either streamed
chunk by chunk or fully buffered
"""

import httpx
from typing import AsyncIterator, Dict, Optional
from tts_proxy.config import settings
from tts_proxy.services.logger import logger

DEFAULT_CONTENT_TYPE = 'audio/mpeg'
DEFAULT_CONTENT_DISPOSITION = 'inline; filename="audio.mp3"'
CACHE_CONTROL = 'public, max-age=3600'


class AudioFetchError(Exception):
    """The audio source answered with a non-2xx status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def relay_headers(upstream: httpx.Response) -> Dict[str, str]:
    """
    Build the client-facing headers from the audio source's response
    """
    headers = {
        'Content-Type': upstream.headers.get('content-type') or DEFAULT_CONTENT_TYPE,
        'Content-Disposition': upstream.headers.get('content-disposition') or DEFAULT_CONTENT_DISPOSITION,
        'Cache-Control': CACHE_CONTROL,
    }
    content_length = upstream.headers.get('content-length')
    # httpx decodes compressed bodies, so an encoded length would not match what we send
    encoding = upstream.headers.get('content-encoding', 'identity')
    if content_length and encoding == 'identity':
        headers['Content-Length'] = content_length
    return headers


class RelayedAudio:
    """An open audio source response plus the headers to forward"""

    def __init__(self, url: str, upstream: httpx.Response):
        self.url = url
        self.upstream = upstream
        self.headers = relay_headers(upstream)
        self._chunks: Optional[AsyncIterator[bytes]] = None
        self._first = b''

    @property
    def media_type(self) -> str:
        return self.headers['Content-Type']

    async def first_chunk(self) -> bytes:
        """
        Read the first body chunk before anything is sent to the client, so a
        source that fails right away can still be reported as an error.
        Returns b'' for an empty body.
        """
        self._chunks = self.upstream.aiter_bytes()
        try:
            self._first = await self._chunks.__anext__()
        except StopAsyncIteration:
            self._first = b''
        except httpx.HTTPError as error:
            logger.error(
                f'Audio stream error before first byte: {str(error)}',
                url=self.url,
                bytesSent=0,
                error=str(error)
            )
            await self.upstream.aclose()
            raise
        return self._first

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """
        Yield the body as received, starting with the chunk read by first_chunk()
        if it was called. Errors are re-raised so the server drops the connection
        instead of ending the body cleanly.
        """
        sent = 0
        try:
            if self._chunks is None:
                self._chunks = self.upstream.aiter_bytes()
            if self._first:
                sent += len(self._first)
                yield self._first
            async for chunk in self._chunks:
                sent += len(chunk)
                yield chunk
        except httpx.HTTPError as error:
            logger.error(
                f'Audio stream error: {str(error)}',
                url=self.url,
                bytesSent=sent,
                error=str(error)
            )
            raise
        finally:
            await self.upstream.aclose()

        logger.info('Audio relay finished', url=self.url, bytesSent=sent)

    async def read(self) -> bytes:
        """Buffer the whole body"""
        try:
            return await self.upstream.aread()
        finally:
            await self.upstream.aclose()


class AudioRelay:
    """Audio download proxy"""

    def __init__(self, http_client: httpx.AsyncClient, user_agent: Optional[str] = None):
        self.http_client = http_client
        self.user_agent = user_agent or settings.USER_AGENT

    async def open(self, url: str) -> RelayedAudio:
        """
        Start downloading url; only the status line and headers are read

        Raises:
            AudioFetchError: the source answered with a non-2xx status
            httpx.HTTPError: the source could not be reached
        """
        logger.info(f'Downloading audio from: {url}', url=url)

        request = self.http_client.build_request(
            'GET',
            url,
            headers={'User-Agent': self.user_agent}
        )
        upstream = await self.http_client.send(request, stream=True)

        if not upstream.is_success:
            await upstream.aclose()
            raise AudioFetchError(
                f'Failed to download audio: {upstream.status_code} {upstream.reason_phrase}',
                status_code=upstream.status_code
            )

        return RelayedAudio(url, upstream)
