from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import cast

import redis

from betonit.protocol.send_tracker import STATUS_NETWORK_ERROR, SendStatus


@dataclass(frozen=True, slots=True)
class ChannelStreams:
    namespace: str

    @property
    def inbox(self) -> str:
        """Receiver -> this endpoint."""
        return f"channel:{self.namespace}:inbox"

    @property
    def outbox(self) -> str:
        """This endpoint -> receiver."""
        return f"channel:{self.namespace}:outbox"


def _fields(*, namespace: str, message: str) -> dict[str, str]:
    return {"namespace": namespace, "message": message}


class RedisStreamTransport:
    """Transport over Redis Streams: every send is one XADD to the outbox stream.

    redis-py is synchronous, so the XADD runs in a worker thread.
    """

    def __init__(self, r: redis.Redis) -> None:
        self._r = r

    async def send(self, namespace: str, message: str) -> SendStatus:
        key = ChannelStreams(namespace=namespace).outbox
        try:
            await asyncio.to_thread(self._r.xadd, key, _fields(namespace=namespace, message=message))
        except redis.RedisError as e:
            return SendStatus(status_code=STATUS_NETWORK_ERROR, reason=str(e))
        return SendStatus()


def publish_inbound(*, r: redis.Redis, namespace: str, message: str) -> str:
    """Append a message to the inbox stream, as the receiver would."""

    stream_id = r.xadd(ChannelStreams(namespace=namespace).inbox, _fields(namespace=namespace, message=message))
    return cast(str, stream_id)
