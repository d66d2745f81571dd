from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from fastapi import WebSocket

from betonit.protocol.channel import ChannelProtocol
from betonit.session import GameSession
from betonit.transports.websocket import WebSocketTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PeerConnection:
    protocol: ChannelProtocol
    session: GameSession


class PeerHub:
    """Holds the single receiver connected over WebSocket.

    Contract:
      - `connect(websocket)` builds a fresh session + protocol and accepts the socket.
      - a newer connection replaces the previous one.
      - `current()` is None while no receiver is connected.
    """

    def __init__(self) -> None:
        self._current: PeerConnection | None = None
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> PeerConnection:
        session = GameSession()
        conn = PeerConnection(
            protocol=ChannelProtocol(session, WebSocketTransport(websocket), loop=asyncio.get_running_loop()),
            session=session,
        )
        # Register before accepting so commands posted right after the handshake find the peer.
        async with self._lock:
            if self._current is not None:
                logger.info("Replacing connected peer")
            self._current = conn
        await websocket.accept()
        return conn

    async def disconnect(self, conn: PeerConnection) -> None:
        async with self._lock:
            if self._current is conn:
                self._current = None
        await conn.protocol.tracker.drain()

    def current(self) -> PeerConnection | None:
        return self._current


hub = PeerHub()
