from __future__ import annotations

import logging

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from betonit.protocol.send_tracker import STATUS_NETWORK_ERROR, SendStatus

logger = logging.getLogger(__name__)


class Envelope(BaseModel):
    """One frame on the peer socket: channel text tagged with its namespace."""

    namespace: str
    message: str


def parse_envelope(text: str) -> Envelope | None:
    try:
        return Envelope.model_validate_json(text)
    except ValidationError as e:
        logger.warning("Dropping bad frame from peer (%s errors): %s", e.error_count(), text)
        return None


class WebSocketTransport:
    def __init__(self, websocket: WebSocket) -> None:
        self._ws = websocket

    async def send(self, namespace: str, message: str) -> SendStatus:
        try:
            await self._ws.send_json(Envelope(namespace=namespace, message=message).model_dump())
        except WebSocketDisconnect as e:
            return SendStatus(status_code=STATUS_NETWORK_ERROR, reason=f"peer disconnected (code={e.code})")
        except (RuntimeError, OSError) as e:
            # Sending on a closed socket: RuntimeError from Starlette, OSError from the server.
            return SendStatus(status_code=STATUS_NETWORK_ERROR, reason=str(e))
        return SendStatus()
