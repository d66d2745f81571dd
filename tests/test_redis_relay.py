from __future__ import annotations

import asyncio

import fakeredis
import pytest
import redis

from betonit.config import GAME_NAMESPACE, Settings
from betonit.protocol.channel import ChannelProtocol
from betonit.protocol.send_tracker import STATUS_NETWORK_ERROR
from betonit.relay import RelayConfig, relay_inbox_once, run_relay, serve_redis_channel
from betonit.transports.redis_streams import ChannelStreams, RedisStreamTransport, publish_inbound

from tests.fakes import RecordingHandler


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


def test_stream_keys_are_scoped_by_namespace() -> None:
    streams = ChannelStreams(namespace=GAME_NAMESPACE)
    assert streams.inbox == "channel:urn:x-cast:com.betonit:inbox"
    assert streams.outbox == "channel:urn:x-cast:com.betonit:outbox"


@pytest.mark.asyncio
async def test_transport_appends_to_outbox(r: fakeredis.FakeRedis) -> None:
    status = await RedisStreamTransport(r).send(GAME_NAMESPACE, '{"command":"leave"}')

    assert status.is_success
    entries = r.xrange(ChannelStreams(namespace=GAME_NAMESPACE).outbox)
    assert [fields for _, fields in entries] == [{"namespace": GAME_NAMESPACE, "message": '{"command":"leave"}'}]


@pytest.mark.asyncio
async def test_transport_maps_redis_errors_to_network_error(
    r: fakeredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _down(*args: object, **kwargs: object) -> None:
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(r, "xadd", _down)

    status = await RedisStreamTransport(r).send(GAME_NAMESPACE, '{"command":"leave"}')

    assert status.status_code == STATUS_NETWORK_ERROR
    assert "connection refused" in status.reason


@pytest.mark.asyncio
async def test_protocol_commands_land_in_outbox(r: fakeredis.FakeRedis, handler: RecordingHandler) -> None:
    protocol = ChannelProtocol(handler, RedisStreamTransport(r))

    protocol.join("Alice")
    protocol.guess(12)
    await protocol.tracker.drain()

    messages = sorted(f["message"] for _, f in r.xrange(ChannelStreams(namespace=GAME_NAMESPACE).outbox))
    assert messages == ['{"command":"guess","guess":12}', '{"command":"join","name":"Alice"}']


@pytest.mark.asyncio
async def test_relay_delivers_inbox_entries(r: fakeredis.FakeRedis, handler: RecordingHandler) -> None:
    protocol = ChannelProtocol(handler, RedisStreamTransport(r))
    inbox = ChannelStreams(namespace=GAME_NAMESPACE).inbox

    publish_inbound(r=r, namespace=GAME_NAMESPACE, message='{"event":"joined","player":"O","opponent":"Ann"}')
    r.xadd(inbox, {"namespace": "urn:x-cast:other", "message": '{"event":"bet_request"}'})
    r.xadd(inbox, {"message": '{"event":"bet_request"}'})
    last = publish_inbound(r=r, namespace=GAME_NAMESPACE, message='{"event":"guess_request"}')

    last_id, delivered = await relay_inbox_once(r=r, protocol=protocol, config=RelayConfig(block_ms=0))

    assert last_id == last
    assert delivered == 3
    assert handler.calls == [("on_game_joined", ("O", "Ann")), ("on_guess_request", ())]

    again_id, again = await relay_inbox_once(r=r, protocol=protocol, last_id=last_id, config=RelayConfig(block_ms=0))
    assert (again_id, again) == (last_id, 0)


@pytest.mark.asyncio
async def test_run_relay_stops_when_asked(r: fakeredis.FakeRedis) -> None:
    stop = asyncio.Event()

    class _StopOnEnd(RecordingHandler):
        def on_game_end(self, end_state: str, winning_location: int) -> None:
            super().on_game_end(end_state, winning_location)
            stop.set()

    handler = _StopOnEnd()
    protocol = ChannelProtocol(handler, RedisStreamTransport(r))
    publish_inbound(r=r, namespace=GAME_NAMESPACE, message='{"event":"bet_request"}')
    publish_inbound(r=r, namespace=GAME_NAMESPACE, message='{"event":"endgame","end_state":"ABANDONED"}')

    await asyncio.wait_for(run_relay(r=r, protocol=protocol, stop=stop, config=RelayConfig(block_ms=0)), timeout=2)

    assert handler.calls == [("on_bet_request", ()), ("on_game_end", ("ABANDONED", -1))]


@pytest.mark.asyncio
async def test_serve_redis_channel_wires_protocol(r: fakeredis.FakeRedis) -> None:
    stop = asyncio.Event()

    class _StopOnGuess(RecordingHandler):
        def on_guess_request(self) -> None:
            super().on_guess_request()
            stop.set()

    publish_inbound(r=r, namespace=GAME_NAMESPACE, message='{"event":"guess_request"}')
    settings = Settings(redis_url="redis://unused", log_level="DEBUG", relay_block_ms=0, relay_count=5)

    handler = _StopOnGuess()
    protocol = await asyncio.wait_for(serve_redis_channel(handler=handler, stop=stop, settings=settings, r=r), timeout=2)

    assert handler.calls == [("on_guess_request", ())]
    assert protocol.namespace == GAME_NAMESPACE
