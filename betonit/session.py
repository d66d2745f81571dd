from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime

from statemachine.exceptions import TransitionNotAllowed

from betonit.api.models import SessionState
from betonit.fsm import SessionFSM
from betonit.protocol.dispatcher import NO_WINNING_LOCATION

logger = logging.getLogger(__name__)


class GameSession:
    """Reference EventHandler that tracks the implied game session.

    Events may arrive on a transport thread, so every update holds a lock.
    Out-of-order events are logged and leave the phase unchanged; their
    payload (names, errors) is still recorded.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = SessionState()

    def snapshot(self) -> SessionState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def on_game_joined(self, player: str, opponent_name: str) -> None:
        with self._lock:
            self._state.player_symbol = player
            self._state.opponent_name = opponent_name
            self._advance("join")

    def on_game_end(self, end_state: str, winning_location: int) -> None:
        with self._lock:
            self._state.end_state = end_state
            self._state.winning_location = None if winning_location == NO_WINNING_LOCATION else winning_location
            self._advance("game_over")

    def on_bet_request(self) -> None:
        with self._lock:
            self._advance("bet_requested")

    def on_guess_request(self) -> None:
        with self._lock:
            self._advance("guess_requested")

    def on_game_error(self, message: str) -> None:
        with self._lock:
            logger.warning("Game error from receiver: %s", message)
            self._state.last_error = message
            self._touch()

    def _advance(self, event: str) -> None:
        fsm = SessionFSM(self._state)
        try:
            fsm.send(event)
        except TransitionNotAllowed:
            logger.warning("Ignoring '%s' in phase '%s'", event, self._state.phase.value)
        else:
            fsm.sync_phase_to_model()
        self._touch()

    def _touch(self) -> None:
        self._state.last_updated_at = datetime.now(tz=UTC)
