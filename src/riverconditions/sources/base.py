"""
Shared HTTP plumbing for upstream telemetry clients.
"""

from typing import Any, Dict, Optional

import httpx

from ..config import UpstreamConfig
from ..exceptions import UpstreamConnectionError, UpstreamQueryError


class BaseSourceClient:
    """
    Async HTTP client for one upstream telemetry service.

    A shared ``httpx.AsyncClient`` may be passed in; otherwise the client
    creates and owns its own.
    """

    SERVICE_NAME = "upstream"
    ACCEPT = "*/*"

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        config: Optional[UpstreamConfig] = None,
    ):
        config = config or UpstreamConfig()
        self.base_url = base_url
        self.timeout = timeout if timeout is not None else config.timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self.timeout,
            verify=config.verify_ssl,
            headers={"User-Agent": config.user_agent, "Accept": self.ACCEPT},
        )

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "BaseSourceClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _get(self, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        """GET the service endpoint, translating httpx errors."""
        try:
            response = await self._client.get(
                self.base_url, params=params, timeout=self.timeout
            )
            response.raise_for_status()
            return response

        except httpx.TimeoutException as e:
            raise UpstreamConnectionError(
                f"{self.SERVICE_NAME} request timeout after {self.timeout}s"
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise UpstreamQueryError(
                    f"{self.SERVICE_NAME} station or data not found"
                ) from e
            elif status == 429:
                raise UpstreamConnectionError(
                    f"{self.SERVICE_NAME} rate limit exceeded"
                ) from e
            elif status >= 500:
                raise UpstreamConnectionError(
                    f"{self.SERVICE_NAME} service temporarily unavailable"
                ) from e
            else:
                raise UpstreamConnectionError(
                    f"{self.SERVICE_NAME} HTTP error {status}: {e}"
                ) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                f"{self.SERVICE_NAME} network error: {e}"
            ) from e
