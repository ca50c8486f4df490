"""
Pytest configuration and fixtures

Outbound HTTP goes through httpx.MockTransport; nothing leaves the process
"""

import pytest
import httpx
from fastapi.testclient import TestClient

from tts_proxy.main import app as app_instance
from tts_proxy.dependencies import get_http_client
from tts_proxy.middleware.rate_limiter import limiter


@pytest.fixture
def app():
    """FastAPI app instance"""
    yield app_instance
    app_instance.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """FastAPI test client (startup events, and so the keep-alive job, do not run)"""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with fresh per-address counters"""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def outbound(app):
    """
    Route the app's outbound calls to a handler

    Usage: calls = outbound(handler); handler(request) -> httpx.Response
    Returns the list of requests the handler received.
    """
    def install(handler):
        calls = []

        def recording_handler(request: httpx.Request):
            calls.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        app.dependency_overrides[get_http_client] = lambda: http_client
        return calls

    return install


@pytest.fixture
def mock_ttsmp3_success():
    """TTSMP3 makemp3.php success payload"""
    return {
        'Error': 0,
        'Speaker': 'Joanna',
        'Cached': 1,
        'Text': 'Hello world',
        'tasktype': 'Playback',
        'URL': 'https://ttsmp3.com/created_mp3/8b38a3b4d8d4d8c6a1b9.mp3',
        'MP3': '8b38a3b4d8d4d8c6a1b9.mp3'
    }


@pytest.fixture
def mock_ttsmp3_error():
    """TTSMP3 payload for a rejected request"""
    return {
        'Error': 'Usage Limit exceeded',
        'Speaker': 'Joanna',
        'URL': ''
    }


@pytest.fixture
def mp3_bytes():
    """Fake MP3 payload (ID3 header + filler)"""
    return b'ID3\x03\x00\x00\x00\x00\x00\x00' + b'\xff\xfb\x90\x64' * 256
