from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pydantic import ValidationError

from betonit.config import GAME_NAMESPACE
from betonit.protocol.codec import decode_event, encode_command
from betonit.protocol.commands import Bet, Command, Guess, Join, Leave
from betonit.protocol.dispatcher import EventDispatcher, EventHandler
from betonit.protocol.errors import ChannelError
from betonit.protocol.send_tracker import SendFailure, SendTracker, Transport

logger = logging.getLogger(__name__)


class ChannelProtocol:
    """Player side of the betonit channel.

    Outbound: `join`, `bet`, `guess`, `leave` encode a command and hand it to
    the transport; they return immediately and never raise.

    Inbound: the transport delivers `(namespace, text)` to `receive`, which
    decodes the message and notifies `handler`. Failures are logged only.

    No game/session state is kept here; that belongs to the handler.
    """

    def __init__(
        self,
        handler: EventHandler,
        transport: Transport,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        on_send_failure: Callable[[SendFailure], None] | None = None,
    ) -> None:
        self._dispatcher = EventDispatcher(handler)
        self._tracker = SendTracker(transport, loop=loop, on_failure=on_send_failure)

    @property
    def namespace(self) -> str:
        return GAME_NAMESPACE

    @property
    def tracker(self) -> SendTracker:
        return self._tracker

    def join(self, name: str) -> None:
        logger.debug("join: %s", name)
        self._send("join a game", lambda: Join(name=name))

    def bet(self, answer_one: int, answer_one_coins: int, answer_two: int, answer_two_coins: int) -> None:
        logger.debug("bet: %s with %s coins", answer_one, answer_one_coins)
        logger.debug("bet: %s with %s coins", answer_two, answer_two_coins)
        self._send(
            "place a bet",
            lambda: Bet(
                answer_one=answer_one,
                answer_one_coins=answer_one_coins,
                answer_two=answer_two,
                answer_two_coins=answer_two_coins,
            ),
        )

    def guess(self, value: int) -> None:
        logger.debug("guess: %s", value)
        self._send("make a guess", lambda: Guess(guess=value))

    def leave(self) -> None:
        logger.debug("leave")
        self._send("leave a game", Leave)

    def on_message(self, text: str) -> None:
        logger.debug("onTextMessageReceived: %s", text)
        try:
            self._dispatcher.dispatch(decode_event(text))
        except Exception:
            logger.exception("Handler failed for message: %s", text)

    def receive(self, namespace: str, text: str) -> None:
        if namespace != self.namespace:
            logger.debug("Ignoring message for namespace %s", namespace)
            return
        self.on_message(text)

    def _send(self, what: str, build: Callable[[], Command]) -> None:
        try:
            text = encode_command(build())
            self._tracker.send(self.namespace, text)
        except (ValidationError, ChannelError):
            logger.exception("Cannot create object to %s", what)
