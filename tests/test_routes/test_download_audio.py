"""
Audio download proxy route tests
"""

import httpx
import pytest
from fastapi import status
from fastapi.testclient import TestClient
from tts_proxy.config import settings

AUDIO_URL = 'https://ttsmp3.com/created_mp3/8b38a3b4d8d4d8c6a1b9.mp3'


@pytest.fixture(params=['stream', 'buffer'])
def relay_mode(request, monkeypatch):
    """Run a test against both relay strategies"""
    monkeypatch.setattr(settings, 'RELAY_MODE', request.param)
    return request.param


def test_download_audio_forwards_headers(client, outbound, mp3_bytes, relay_mode):
    """Test the relay matches the source's content-type and content-length"""
    calls = outbound(lambda request: httpx.Response(
        200,
        content=mp3_bytes,
        headers={'content-type': 'audio/mpeg'}
    ))

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_200_OK
    assert response.content == mp3_bytes
    assert response.headers['content-type'] == 'audio/mpeg'
    assert response.headers['content-length'] == str(len(mp3_bytes))
    assert response.headers['content-disposition'] == 'inline; filename="audio.mp3"'
    assert response.headers['cache-control'] == 'public, max-age=3600'

    assert calls[0].method == 'GET'
    assert str(calls[0].url) == AUDIO_URL
    assert 'Chrome' in calls[0].headers['user-agent']


def test_download_audio_keeps_source_disposition(client, outbound, mp3_bytes, relay_mode):
    """Test source content-type and content-disposition win over the defaults"""
    outbound(lambda request: httpx.Response(
        200,
        content=mp3_bytes,
        headers={
            'content-type': 'audio/ogg',
            'content-disposition': 'attachment; filename="voice.ogg"'
        }
    ))

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_200_OK
    assert response.headers['content-type'] == 'audio/ogg'
    assert response.headers['content-disposition'] == 'attachment; filename="voice.ogg"'


def test_download_audio_default_content_type(client, outbound, mp3_bytes):
    """Test audio/mpeg is used when the source sends no content-type"""
    outbound(lambda request: httpx.Response(200, content=mp3_bytes))

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_200_OK
    assert response.headers['content-type'] == 'audio/mpeg'


def test_download_audio_missing_url(client, outbound):
    """Test missing audioUrl is rejected before any outbound call"""
    calls = outbound(lambda request: httpx.Response(200))

    response = client.post('/api/download-audio', json={})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {'error': 'audioUrl is required.'}
    assert calls == []


def test_download_audio_source_error_status(client, outbound, relay_mode):
    """Test a non-2xx source yields a JSON 500"""
    outbound(lambda request: httpx.Response(404, text='Not Found'))

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body['error'] == 'Failed to download audio via proxy.'
    assert body['details'] == 'Failed to download audio: 404 Not Found'
    assert body['url'] == AUDIO_URL


def test_download_audio_unreachable(client, outbound, relay_mode):
    """Test an unreachable source yields a JSON 500 since nothing was sent yet"""
    def handler(request):
        raise httpx.ConnectError('Connection refused', request=request)

    outbound(handler)

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()['details'] == 'Connection refused'


class FailingStream(httpx.AsyncByteStream):
    """Source body that yields the given chunks, then drops the connection"""

    def __init__(self, chunks=()):
        self.chunks = list(chunks)
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        raise httpx.ReadError('Connection reset by peer')

    async def aclose(self):
        self.closed = True


@pytest.fixture
def stream_mode(monkeypatch):
    monkeypatch.setattr(settings, 'RELAY_MODE', 'stream')


def test_download_audio_fails_before_first_byte(client, outbound, stream_mode):
    """Test a source that breaks before sending anything yields a JSON 500"""
    stream = FailingStream()
    outbound(lambda request: httpx.Response(
        200,
        stream=stream,
        headers={'content-type': 'audio/mpeg', 'content-length': '4096'}
    ))

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = response.json()
    assert body['error'] == 'Failed to download audio via proxy.'
    assert body['details'] == 'Connection reset by peer'
    assert body['url'] == AUDIO_URL
    assert stream.closed


def test_download_audio_truncates_after_first_chunk(app, outbound, stream_mode):
    """Test a source that breaks mid-body cuts the response short instead of sending JSON"""
    first = b'ID3 first chunk'
    outbound(lambda request: httpx.Response(
        200,
        stream=FailingStream([first]),
        headers={'content-type': 'audio/mpeg', 'content-length': '4096'}
    ))
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_200_OK
    assert response.headers['content-type'] == 'audio/mpeg'
    assert response.headers['content-length'] == '4096'
    assert first.startswith(response.content)
    assert len(response.content) < 4096
    assert b'error' not in response.content


def test_download_audio_empty_source(client, outbound, stream_mode):
    """Test an empty source body is relayed as an empty 200"""
    outbound(lambda request: httpx.Response(200, content=b'', headers={'content-type': 'audio/mpeg'}))

    response = client.post('/api/download-audio', json={'audioUrl': AUDIO_URL})

    assert response.status_code == status.HTTP_200_OK
    assert response.content == b''


def test_download_audio_wrong_type(client, outbound):
    """Test a non-string audioUrl is rejected as invalid input"""
    calls = outbound(lambda request: httpx.Response(200))

    response = client.post('/api/download-audio', json={'audioUrl': 42})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()['error'] == 'Invalid request body.'
    assert calls == []
