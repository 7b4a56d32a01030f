"""
Combined client for all upstream telemetry sources.
"""

from typing import Any, Optional

import httpx

from .config import UpstreamConfig
from .sources import NWRFCClient, USGSClient


class RiverDataClient:
    """
    Holds one shared HTTP connection pool and the per-source clients.

    Use as an async context manager::

        async with RiverDataClient() as client:
            record = await get_river_record("mckenzie_hayden", client=client)
    """

    def __init__(self, config: Optional[UpstreamConfig] = None):
        self.config = config or UpstreamConfig()
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout,
            verify=self.config.verify_ssl,
            headers={"User-Agent": self.config.user_agent},
        )
        self.usgs = USGSClient(http_client=self._client, config=self.config)
        self.nwrfc = NWRFCClient(http_client=self._client, config=self.config)

    async def close(self) -> None:
        """Close the shared HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "RiverDataClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
