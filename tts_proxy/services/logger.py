"""
Structured Logging Service

Uses structlog for fast, structured logging
"""

import os
import sys
import structlog
import logging

def add_service_name(logger, method_name, event_dict):
    """Tag every entry with the service name"""
    event_dict.setdefault('service', 'tts-proxy')
    return event_dict


# Configure structlog; requestId is bound per request by RequestLoggerMiddleware
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if os.getenv('APP_ENV') == 'production' else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

# Get log level from environment
log_level = os.getenv('LOG_LEVEL', 'info')
logging.basicConfig(
    format="%(message)s",
    stream=sys.stdout,
    level=getattr(logging, log_level.upper(), logging.INFO),
)

# Outbound calls are logged by the services themselves
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('httpcore').setLevel(logging.WARNING)
logging.getLogger('apscheduler').setLevel(logging.WARNING)

# Create logger instance
logger = structlog.get_logger('tts_proxy')
