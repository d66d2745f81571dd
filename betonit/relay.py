from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import redis

from betonit.config import Settings, settings_from_env
from betonit.infra.redis_client import create_redis
from betonit.protocol.channel import ChannelProtocol
from betonit.protocol.dispatcher import EventHandler
from betonit.transports.redis_streams import ChannelStreams, RedisStreamTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RelayConfig:
    # How long to block waiting for inbox messages. 0 means don't block.
    block_ms: int = 250
    # Max messages to read per iteration.
    count: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayConfig":
        return cls(block_ms=settings.relay_block_ms, count=settings.relay_count)


def _entries(reply: Any) -> list[tuple[str, dict[str, str]]]:
    """Flatten an XREAD reply (RESP2 list or RESP3 dict) for a single stream."""

    if not reply:
        return []
    if isinstance(reply, dict):
        groups = list(reply.values())
    else:
        groups = [entries for _, entries in reply]
    return [(str(entry_id), fields) for entries in groups for entry_id, fields in entries]


async def relay_inbox_once(
    *,
    r: redis.Redis,
    protocol: ChannelProtocol,
    last_id: str = "0",
    config: RelayConfig = RelayConfig(),
) -> tuple[str, int]:
    """Deliver pending inbox messages to `protocol`.

    Returns the id to resume from and how many entries were delivered.
    """

    key = ChannelStreams(namespace=protocol.namespace).inbox
    # XREAD BLOCK 0 waits forever; treat 0 as a non-blocking poll instead.
    block = config.block_ms if config.block_ms > 0 else None
    reply = await asyncio.to_thread(r.xread, {key: last_id}, count=config.count, block=block)

    delivered = 0
    for entry_id, fields in _entries(reply):
        last_id = str(entry_id)
        namespace = fields.get("namespace")
        message = fields.get("message")
        if namespace is None or message is None:
            logger.warning("Skipping inbox entry %s without namespace/message: %s", entry_id, fields)
            continue
        protocol.receive(namespace, message)
        delivered += 1
    return last_id, delivered


async def run_relay(
    *,
    r: redis.Redis,
    protocol: ChannelProtocol,
    stop: asyncio.Event,
    config: RelayConfig = RelayConfig(),
    last_id: str = "0",
) -> str:
    """Pump the inbox into `protocol` until `stop` is set. Returns the last id seen."""

    logger.info("Relaying %s", ChannelStreams(namespace=protocol.namespace).inbox)
    while not stop.is_set():
        try:
            last_id, _ = await relay_inbox_once(r=r, protocol=protocol, last_id=last_id, config=config)
        except redis.RedisError:
            logger.exception("Inbox read failed; retrying")
            await asyncio.sleep(config.block_ms / 1000 if config.block_ms > 0 else 0.1)
            continue
        if config.block_ms <= 0:
            await asyncio.sleep(0)
    await protocol.tracker.drain()
    return last_id


async def serve_redis_channel(
    *,
    handler: EventHandler,
    stop: asyncio.Event,
    settings: Settings | None = None,
    r: redis.Redis | None = None,
) -> ChannelProtocol:
    """Wire a ChannelProtocol to Redis Streams and relay until `stop` is set."""

    settings = settings or settings_from_env()
    client = r if r is not None else create_redis(settings.redis_url)
    protocol = ChannelProtocol(handler, RedisStreamTransport(client), loop=asyncio.get_running_loop())
    try:
        await run_relay(r=client, protocol=protocol, stop=stop, config=RelayConfig.from_settings(settings))
    finally:
        if r is None:
            client.close()
    return protocol
