# site_mapper/crawler/transport.py
"""
HTTP transport for the fetcher: one GET per call, raw body back.

Any object with a matching ``send`` coroutine can stand in for
:class:`AiohttpTransport`; the fetcher cancels ``send`` when its deadline
expires, so implementations must tolerate cancellation mid-flight.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status: int
    reason: str
    body: bytes


class TransportError(Exception):
    """Connection-level failure (DNS, refused connection, TLS, broken payload)."""


class Transport(Protocol):
    async def send(
        self, url: str, *, headers: Mapping[str, str], verify_ssl: bool
    ) -> TransportResponse: ...


class AiohttpTransport:
    """aiohttp-backed transport; owns its :class:`ClientSession` unless one is injected."""

    def __init__(self, session: Optional[ClientSession] = None, *, proxy: Optional[str] = None) -> None:
        self.session = session
        self.proxy = proxy
        self._owns_session = session is None

    async def __aenter__(self) -> AiohttpTransport:
        if self.session is None:
            # deadlines are enforced per request by the fetcher
            self.session = ClientSession(timeout=ClientTimeout(total=None))
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def send(
        self, url: str, *, headers: Mapping[str, str], verify_ssl: bool
    ) -> TransportResponse:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(
                url,
                headers=dict(headers),
                ssl=verify_ssl,
                proxy=self.proxy,
                raise_for_status=False,
            ) as resp:
                body = await resp.read()
                return TransportResponse(status=resp.status, reason=resp.reason or "", body=body)
        except asyncio.TimeoutError:
            raise
        except (ClientError, ValueError) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc


__all__ = ["AiohttpTransport", "Transport", "TransportError", "TransportResponse"]
