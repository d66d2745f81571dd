from __future__ import annotations

import logging
from typing import Protocol

from betonit.protocol.events import (
    BetRequest,
    EndGame,
    Event,
    GameError,
    GuessRequest,
    Joined,
    MalformedMessage,
    Unrecognized,
)

logger = logging.getLogger(__name__)

# Passed to on_game_end when the game ended without a winning line.
NO_WINNING_LOCATION = -1


class EventHandler(Protocol):
    """Receives game notifications from the remote peer.

    Implemented by the application; the protocol only calls it.
    """

    def on_game_joined(self, player: str, opponent_name: str) -> None:  # pragma: no cover
        ...

    def on_game_end(self, end_state: str, winning_location: int) -> None:  # pragma: no cover
        ...

    def on_bet_request(self) -> None:  # pragma: no cover
        ...

    def on_guess_request(self) -> None:  # pragma: no cover
        ...

    def on_game_error(self, message: str) -> None:  # pragma: no cover
        ...


class EventDispatcher:
    def __init__(self, handler: EventHandler) -> None:
        self._handler = handler

    def dispatch(self, result: Event | MalformedMessage) -> bool:
        """Invoke at most one handler method. Returns True if one was invoked."""

        h = self._handler

        if isinstance(result, Joined):
            logger.debug("JOINED player=%s opponent=%s", result.player, result.opponent_name)
            h.on_game_joined(result.player, result.opponent_name)
        elif isinstance(result, EndGame):
            location = NO_WINNING_LOCATION if result.winning_location is None else result.winning_location
            logger.debug("ENDGAME end_state=%s winning_location=%s", result.end_state, location)
            h.on_game_end(result.end_state, location)
        elif isinstance(result, GameError):
            logger.debug("ERROR %s", result.message)
            h.on_game_error(result.message)
        elif isinstance(result, BetRequest):
            logger.debug("BET_REQUEST")
            h.on_bet_request()
        elif isinstance(result, GuessRequest):
            logger.debug("GUESS_REQUEST")
            h.on_guess_request()
        elif isinstance(result, Unrecognized):
            logger.info("Unknown payload: %s", result.raw_payload)
            return False
        elif isinstance(result, MalformedMessage):
            logger.warning("Malformed message (%s): %s", result.reason, result.text)
            return False
        else:
            raise TypeError(f"Cannot dispatch {type(result).__name__}")

        return True
