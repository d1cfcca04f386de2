"""API publisher plugin.

POSTs each snapshot as JSON to a remote endpoint. Delivery problems are
logged and never retried; the next tick sends a fresh snapshot.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from sysmon.core.constants import API_USER_AGENT, DEFAULT_API_TIMEOUT_SECONDS
from sysmon.core.models import MetricsSnapshot
from sysmon.core.plugin import ISinkPlugin

logger = logging.getLogger(__name__)


def format_timestamp(ts: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.fffZ`` in UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return f"{ts:%Y-%m-%dT%H:%M:%S}.{ts.microsecond // 1000:03d}Z"


def build_payload(snapshot: MetricsSnapshot) -> dict:
    """Build the JSON body sent for one snapshot."""
    return {
        "cpu": round(snapshot.cpu_usage_percent, 2),
        "ram_used": snapshot.ram_used_mb,
        "disk_used": snapshot.disk_used_mb,
        "timestamp": format_timestamp(snapshot.captured_at),
    }


class ApiPublisherPlugin(ISinkPlugin):
    """Publishes snapshots to an HTTP endpoint."""

    name = "API Publisher Plugin"

    def __init__(
        self,
        api_endpoint: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_API_TIMEOUT_SECONDS,
    ):
        """Initialize API publisher.

        Args:
            api_endpoint: Target URL (blank disables the plugin)
            client: Optional preconfigured HTTP client (not closed by the plugin)
            timeout: Request timeout in seconds
        """
        if api_endpoint is None:
            raise ValueError("api_endpoint must not be None")
        self.api_endpoint = api_endpoint.strip()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.client.headers["User-Agent"] = API_USER_AGENT

    @property
    def enabled(self) -> bool:
        return bool(self.api_endpoint)

    async def initialize(self, stop_event: Optional[asyncio.Event] = None) -> None:
        if not self.enabled:
            logger.warning("API endpoint is not configured. Plugin will be disabled.")
            raise ValueError("API endpoint is empty")

    async def process(self, snapshot: MetricsSnapshot, stop_event: Optional[asyncio.Event] = None) -> None:
        if not self.enabled:
            return

        payload = build_payload(snapshot)
        logger.debug(f"Sending metrics to API: {payload}")

        try:
            response = await self.client.post(self.api_endpoint, json=payload)
        except httpx.TimeoutException:
            logger.error("Timeout while sending metrics to API")
            return
        except httpx.HTTPError as e:
            logger.error(f"HTTP error while sending metrics to API: {e}")
            return

        if response.is_success:
            logger.debug("Successfully sent metrics to API endpoint")
        else:
            logger.warning(f"API request failed with status code: {response.status_code}")

    async def cleanup(self, stop_event: Optional[asyncio.Event] = None) -> None:
        if self._owns_client:
            await self.client.aclose()
        logger.info("API publisher plugin cleaned up")
