"""
Request Logger Middleware

Logs all incoming requests with timing information and binds the request id
to structlog's context so service logs (TTSMP3 calls, audio relays) carry it
"""

import time
import uuid
import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from tts_proxy.config import settings
from tts_proxy.services.logger import logger

AUDIO_PATH = '/api/download-audio'


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests with timing"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(requestId=request_id)

        start_time = time.time()

        logger.info(
            f"→ {request.method} {request.url.path}",
            method=request.method,
            path=request.url.path,
            clientIp=request.client.host if request.client else None
        )

        try:
            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000

            extra = {}
            if request.url.path == AUDIO_PATH and response.status_code == 200:
                # Time to headers only; the relay logs bytesSent when the body is done
                extra = {
                    'relayMode': settings.RELAY_MODE,
                    'contentType': response.headers.get('content-type'),
                    'contentLength': response.headers.get('content-length')
                }
            elif response.status_code == 429:
                extra = {'rateLimited': True}

            logger.info(
                f"← {request.method} {request.url.path} {response.status_code} ({duration_ms:.1f}ms)",
                method=request.method,
                path=request.url.path,
                statusCode=response.status_code,
                durationMs=duration_ms,
                **extra
            )

            response.headers['X-Request-ID'] = request_id
            return response
        except Exception as error:
            duration_ms = (time.time() - start_time) * 1000

            logger.error(
                f"✗ {request.method} {request.url.path} ERROR ({duration_ms:.1f}ms)",
                method=request.method,
                path=request.url.path,
                error=str(error),
                durationMs=duration_ms
            )
            raise
