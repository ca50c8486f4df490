"""
Error Handler Middleware

Handles errors and returns consistent error responses
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from tts_proxy.services.logger import logger


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle validation errors (malformed request bodies)
    """
    logger.warning(
        f"Validation error: {exc.errors()}",
        requestId=getattr(request.state, 'request_id', None),
        path=request.url.path,
        errors=exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            'error': 'Invalid request body.',
            'details': jsonable_errors(exc)
        }
    )


def jsonable_errors(exc):
    """Strip request or pydantic validation errors down to JSON-safe fields"""
    return [
        {
            'loc': list(error.get('loc', ())),
            'msg': error.get('msg'),
            'type': error.get('type')
        }
        for error in exc.errors()
    ]


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handle HTTP exceptions

    Dict details are returned as the response body, anything else as {'error': detail}
    """
    logger.warning(
        f"HTTP {exc.status_code}: {exc.detail}",
        requestId=getattr(request.state, 'request_id', None),
        path=request.url.path,
        statusCode=exc.status_code,
        detail=exc.detail
    )
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {'error': exc.detail or 'An error occurred'}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, 'headers', None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle general exceptions
    """
    logger.error(
        f"Unhandled exception: {str(exc)}",
        requestId=getattr(request.state, 'request_id', None),
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            'error': 'Internal server error',
            'details': str(exc)
        }
    )
