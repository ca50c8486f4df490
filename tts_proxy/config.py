"""
Configuration Module

Loads and validates environment variables
"""

from typing import List
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()

RELAY_MODES = ('stream', 'buffer')


class Settings(BaseSettings):
    """Application settings"""

    # Server
    PORT: int = 3000
    APP_ENV: str = 'development'

    # Logging
    LOG_LEVEL: str = 'info'

    # CORS (comma separated)
    ALLOWED_ORIGINS: str = 'http://localhost:3000,https://pdf-reader-front.onrender.com'

    # TTSMP3
    TTS_API_URL: str = 'https://ttsmp3.com/makemp3.php'
    TTS_SOURCE: str = 'ttsmp3'
    USER_AGENT: str = (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'
    )

    # Rate limiting
    RATE_LIMIT: str = '200 per 15 minutes'
    RATE_LIMIT_STORAGE_URI: str = 'memory://'

    # Audio relay: 'stream' or 'buffer'
    RELAY_MODE: str = 'stream'

    # Keep-alive pinger
    KEEP_ALIVE_ENABLED: bool = True
    KEEP_ALIVE_URL: str = ''
    KEEP_ALIVE_INTERVAL_SECONDS: int = 5 * 60

    class Config:
        env_file = '.env'
        case_sensitive = True

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',') if origin.strip()]

    @property
    def keep_alive_url(self) -> str:
        """Ping target, defaulting to this instance's own health endpoint"""
        return self.KEEP_ALIVE_URL or f'http://localhost:{self.PORT}/api/health'


def validate_env(config: 'Settings' = None) -> List[str]:
    """
    Validate configuration values
    Returns:
        List of problems found (empty when the configuration is usable)
    """
    config = config or settings
    problems = []

    if config.RELAY_MODE not in RELAY_MODES:
        problems.append(f'RELAY_MODE must be one of {", ".join(RELAY_MODES)} (got {config.RELAY_MODE!r})')

    if config.KEEP_ALIVE_INTERVAL_SECONDS <= 0:
        problems.append('KEEP_ALIVE_INTERVAL_SECONDS must be positive')

    if not config.cors_origins:
        problems.append('ALLOWED_ORIGINS must list at least one origin')

    return problems


# Create settings instance
settings = Settings()
