"""
FastAPI Main Application

Entry point for the TTS proxy backend
"""

import sys
import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded
from tts_proxy.config import settings, validate_env
from tts_proxy.middleware.request_logger import RequestLoggerMiddleware
from tts_proxy.middleware.error_handler import (
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from tts_proxy.middleware.rate_limiter import limiter, rate_limit_handler
from tts_proxy.services.keep_alive import KeepAliveService
from tts_proxy.services.logger import logger
from tts_proxy.routes import audio, status, tts

# Validate configuration
problems = validate_env()
if problems:
    for problem in problems:
        logger.error(f'Invalid configuration: {problem}')
    sys.exit(1)

# Create FastAPI app
app = FastAPI(
    title='Enhanced PDF Reader Backend',
    description='TTS and audio download proxy for the PDF reader frontend',
    version='1.0.0'
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=['GET', 'POST', 'PUT', 'DELETE'],
    allow_headers=['Content-Type', 'Authorization'],
    expose_headers=['Content-Disposition'],
)

# Add request logging middleware
app.add_middleware(RequestLoggerMiddleware)

# Add rate limiting
app.state.limiter = limiter

# Add error handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(Exception, general_exception_handler)

keep_alive = KeepAliveService(settings.keep_alive_url, settings.KEEP_ALIVE_INTERVAL_SECONDS)

ROOT_PAGE = """
<h1>Enhanced PDF Reader Backend</h1>
<p>Server is running successfully!</p>
<h2>Available Endpoints:</h2>
<ul>
    <li><strong>POST /api/tts</strong> - Generate TTS audio URLs</li>
    <li><strong>POST /api/download-audio</strong> - Download audio files (CORS proxy)</li>
    <li><strong>GET /api/health</strong> - Health check</li>
</ul>
<p><a href="/api/health">Check API Health</a></p>
"""


@app.get('/', response_class=HTMLResponse)
async def root():
    """Summary page, not rate limited"""
    return ROOT_PAGE


# Startup event
@app.on_event('startup')
async def startup_event():
    """Initialize services on startup"""
    logger.info('Starting Enhanced PDF Reader Backend...', port=settings.PORT, relayMode=settings.RELAY_MODE)

    app.state.http_client = httpx.AsyncClient()

    if settings.KEEP_ALIVE_ENABLED:
        keep_alive.start()

    logger.info(f'Test the API at http://localhost:{settings.PORT}/api/health')


# Shutdown event
@app.on_event('shutdown')
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info('Shutting down Enhanced PDF Reader Backend...')
    keep_alive.stop()
    await app.state.http_client.aclose()


app.include_router(status.router, prefix='/api', tags=['status'])
app.include_router(tts.router, prefix='/api', tags=['tts'])
app.include_router(audio.router, prefix='/api', tags=['audio'])


def run():
    """Console entry point"""
    uvicorn.run(app, host='0.0.0.0', port=settings.PORT)


if __name__ == '__main__':
    run()
