"""Webhook sink - POSTs each dashboard view as JSON to an HTTP endpoint."""

from __future__ import annotations

import logging

import httpx

from hrems.models import DashboardView
from hrems.sinks.base import Sink

__all__ = ["WebhookSink"]

logger = logging.getLogger("hrems.sinks.webhook")


class WebhookSink(Sink):
    """POST dashboard views as JSON to an HTTP endpoint.

    Parameters:
        url: Target endpoint (must accept ``POST``).
        headers: Extra HTTP headers (e.g. ``{"Authorization": "Bearer …"}``).
        timeout_s: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport override.
        **kwargs: Forwarded to :class:`Sink`.
    """

    def __init__(
        self,
        *,
        url: str,
        headers: dict[str, str] | None = None,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._url = url
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._timeout = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers=self._headers,
            transport=self._transport,
        )
        logger.info("WebhookSink ready - target: %s", self._url)

    async def write(self, view: DashboardView) -> None:
        if self._client is None:
            raise RuntimeError("WebhookSink is not connected")

        resp = await self._client.post(self._url, content=view.to_json())
        resp.raise_for_status()

        logger.debug("POST %s - HTTP %d", self._url, resp.status_code)

    async def flush(self) -> None:
        """No-op - writes are already synchronous POSTs."""

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("WebhookSink closed")
