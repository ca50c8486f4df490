"""
Rate Limiter Middleware

Per-address fixed-window rate limiting for the public API routes using slowapi
"""

from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from starlette.responses import JSONResponse
from tts_proxy.config import settings
from tts_proxy.services.logger import logger

# Initialize limiter
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy='fixed-window'
)

# Shared quota definition; each decorated route keeps its own counter
api_limiter = limiter.limit(settings.RATE_LIMIT)


def rate_limit_message(limit_value: str) -> str:
    """Throttling message naming the configured window, e.g. '15 minutes'"""
    item = parse(limit_value)
    unit = item.GRANULARITY.name
    window = f'{item.multiples} {unit}s' if item.multiples != 1 else f'1 {unit}'
    return f'Too many requests from this IP, please try again after {window}.'


RATE_LIMIT_MESSAGE = rate_limit_message(settings.RATE_LIMIT)


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded
    """
    logger.warning(
        'Rate limit exceeded',
        requestId=getattr(request.state, 'request_id', None),
        path=request.url.path,
        clientIp=get_remote_address(request),
        limit=exc.detail
    )
    response = JSONResponse(
        status_code=429,
        content={
            'error': 'Rate limit exceeded',
            'message': RATE_LIMIT_MESSAGE
        }
    )
    view_rate_limit = getattr(request.state, 'view_rate_limit', None)
    if view_rate_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_rate_limit)
    return response
