"""
Keep-Alive Service

Pings this service's own health endpoint on an interval so hosting platforms
that suspend idle instances keep it warm. Uses APScheduler.
"""

from datetime import datetime, timezone
from typing import Optional
import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from tts_proxy.services.logger import logger


class KeepAliveService:
    def __init__(
        self,
        url: str,
        interval_seconds: int = 5 * 60,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self.interval_seconds = interval_seconds
        self.transport = transport
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False

    def start(self):
        """Start the ping job (must be called from a running event loop)"""
        if self.is_running:
            logger.warning('Keep-alive already running')
            return

        logger.info(
            f'[KeepAlive] Started at {datetime.now(timezone.utc).isoformat()}',
            url=self.url,
            intervalSeconds=self.interval_seconds
        )

        self.scheduler = AsyncIOScheduler(timezone='UTC')
        self.scheduler.add_job(
            self.ping,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id='keep_alive_ping',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        self.is_running = True

    def stop(self):
        """Stop the ping job"""
        if not self.is_running:
            return

        logger.info('[KeepAlive] Stopping')
        self.scheduler.shutdown(wait=False)
        self.scheduler = None
        self.is_running = False

    async def ping(self) -> bool:
        """
        Call the health endpoint once and log the outcome
        Returns:
            True if the endpoint answered with a 2xx JSON payload
        """
        logger.info(f'[KeepAlive] Sending ping at {datetime.now(timezone.utc).isoformat()}...', url=self.url)

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    raise ValueError(f'unexpected health payload: {data!r}')
        except (httpx.HTTPError, ValueError) as error:
            logger.error(f'[KeepAlive] Error during ping: {str(error)}', url=self.url, error=str(error))
            return False

        logger.info(
            '[KeepAlive] Response received',
            status=data.get('status'),
            timestamp=data.get('timestamp'),
            endpoints=len(data.get('endpoints') or [])
        )
        return True
