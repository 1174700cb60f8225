"""Async HTTP client for the hydractl control API.

Example usage::

    async with ControlClient("https://gate.example", token="...") as client:
        await client.open_to_end()
        print(await client.status())
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import httpx

from hydractl.domain.models import StatusSnapshot

logger = logging.getLogger(__name__)


class ControlClientError(Exception):
    """Raised when a control request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def format_client_time(moment: datetime | None = None) -> str:
    """Format a timestamp the way the server expects it (RFC 3339, UTC)."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ControlClient:
    """Sends commands to one environment of a hydractl server."""

    def __init__(
        self,
        base_url: str,
        token: str,
        environment: str = "sim",
        timeout: float = 10.0,
        route_prefix: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._environment = environment
        self._timeout = timeout
        self._route_prefix = route_prefix.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={"Authorization": f"Bearer {self._token}"},
            transport=self._transport,
        )
        logger.debug("Control client ready for %s", self._base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client. Safe to call more than once."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ControlClient:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()

    # -------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------

    async def status(self) -> StatusSnapshot:
        resp = await self._request("GET", "status")
        return StatusSnapshot.model_validate(resp.json())

    async def open(self) -> StatusSnapshot:
        return await self._timed_command("open")

    async def close(self) -> StatusSnapshot:
        return await self._timed_command("close")

    async def open_to_end(self) -> StatusSnapshot:
        return await self._timed_command("open-to-end")

    async def close_to_end(self) -> StatusSnapshot:
        return await self._timed_command("close-to-end")

    async def stop(self) -> StatusSnapshot:
        return await self._timed_command("stop")

    async def set_simulated_error(self, active: bool) -> str:
        resp = await self._request("POST", "sim-error" if active else "sim-no-error")
        return resp.json()

    async def hold_open(self, duration: float, refresh_interval: float = 0.5) -> StatusSnapshot:
        """Keep re-sending the open hold command for ``duration`` seconds."""
        return await self._hold("open", duration, refresh_interval)

    async def hold_close(self, duration: float, refresh_interval: float = 0.5) -> StatusSnapshot:
        """Keep re-sending the close hold command for ``duration`` seconds."""
        return await self._hold("close", duration, refresh_interval)

    async def _hold(self, cmd: str, duration: float, refresh_interval: float) -> StatusSnapshot:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + duration
        snapshot = await self._timed_command(cmd)
        while loop.time() + refresh_interval < deadline:
            await asyncio.sleep(refresh_interval)
            snapshot = await self._timed_command(cmd)
        return snapshot

    async def _timed_command(self, cmd: str) -> StatusSnapshot:
        resp = await self._request("POST", cmd, {"time": format_client_time()})
        return StatusSnapshot.model_validate(resp.json())

    async def _request(self, method: str, cmd: str, payload: dict | None = None) -> httpx.Response:
        if self._client is None:
            raise ControlClientError("Not connected to control server")
        path = f"{self._route_prefix}/{self._environment}/{cmd}"
        try:
            resp = await self._client.request(method, path, json=payload)
        except httpx.HTTPError as e:
            raise ControlClientError(f"{method} {path} failed: {e}") from e
        if resp.is_error:
            raise ControlClientError(
                f"{method} {path} returned {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )
        logger.debug("%s %s -> %s", method, path, resp.text)
        return resp
