"""
Status Routes

Test endpoint and health check
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Request
from tts_proxy.middleware.rate_limiter import api_limiter

router = APIRouter()

ENDPOINTS = [
    'GET /api/data - Test endpoint',
    'POST /api/tts - Generate TTS audio URL',
    'POST /api/download-audio - Download audio file (CORS proxy)',
    'GET /api/health - Health check'
]

# Informational only; voices are passed to TTSMP3 unchecked
SUPPORTED_VOICES = {
    'english': ['Joanna', 'Matthew', 'Amy', 'Brian', 'Nicole', 'Russell'],
    'portuguese': ['Ricardo', 'Camila', 'Vitoria', 'Cristiano', 'Ines']
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


@router.get('/data')
@api_limiter
async def get_data(request: Request):
    """Test endpoint"""
    return {
        'message': 'Enhanced API with audio download proxy is running!',
        'timestamp': _timestamp()
    }


@router.get('/health')
async def health_check():
    """Health check endpoint"""
    return {
        'status': 'healthy',
        'timestamp': _timestamp(),
        'endpoints': ENDPOINTS,
        'supportedVoices': SUPPORTED_VOICES
    }
