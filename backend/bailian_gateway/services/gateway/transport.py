"""HTTP transport for DashScope calls."""
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional
import httpx
from bailian_gateway.core.config import settings
from bailian_gateway.services.gateway.errors import UpstreamHTTPError, VendorProtocolError
from bailian_gateway.services.gateway.translators.dashscope.errors import map_error_body

logger = logging.getLogger(__name__)


def _mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    masked = dict(headers)
    auth = masked.get("Authorization")
    if auth:
        masked["Authorization"] = f"{auth[:11]}***"
    return masked


class HTTPTransport:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    Network failures surface as the ``httpx.RequestError`` raised by httpx.
    Non-2xx answers are mapped through the DashScope error body when possible.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                settings.DASHSCOPE_TIMEOUT_SECONDS,
                connect=settings.DASHSCOPE_CONNECT_TIMEOUT_SECONDS,
            )
        )

    def new_request(
        self,
        method: str,
        url: str,
        payload: Dict[str, Any],
        headers: Dict[str, str],
    ) -> httpx.Request:
        logger.debug(f"DashScope request: {method} {url} headers={_mask_headers(headers)}")
        return self.client.build_request(method, url, json=payload, headers=headers)

    async def send(self, request: httpx.Request) -> Dict[str, Any]:
        """Send a request and decode the JSON body."""
        response = await self.client.send(request)
        self._raise_for_status(response)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Invalid JSON from DashScope: {response.text[:200]}")
            raise UpstreamHTTPError(f"Invalid JSON response from DashScope: {e}") from e

    async def send_streaming(self, request: httpx.Request) -> AsyncIterator[str]:
        """
        Send a request and return its body as a line iterator.

        The status is checked before returning, so HTTP errors are raised here
        rather than from the iterator.
        """
        response = await self.client.send(request, stream=True)
        if response.is_error:
            try:
                await response.aread()
            finally:
                await response.aclose()
            self._raise_for_status(response)
        return self._iter_lines(response)

    async def _iter_lines(self, response: httpx.Response) -> AsyncIterator[str]:
        try:
            async for line in response.aiter_lines():
                yield line
        finally:
            await response.aclose()

    def _raise_for_status(self, response: httpx.Response) -> None:
        if not response.is_error:
            return
        error = map_error_body(response.content)
        logger.error(f"DashScope API error: {response.status_code} - {response.text[:200]}")
        if error is not None:
            raise VendorProtocolError(error, status_code=response.status_code)
        raise UpstreamHTTPError(
            f"DashScope returned HTTP {response.status_code}",
            status_code=response.status_code,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
