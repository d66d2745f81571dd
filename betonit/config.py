from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

# Namespace shared with the receiver; both ends must agree on it.
GAME_NAMESPACE: Final = "urn:x-cast:com.betonit"

# Discriminators
KEY_EVENT: Final = "event"
KEY_COMMAND: Final = "command"

# Receivable event types
EVENT_JOINED: Final = "joined"
EVENT_ENDGAME: Final = "endgame"
EVENT_ERROR: Final = "error"
EVENT_BET_REQUEST: Final = "bet_request"
EVENT_GUESS_REQUEST: Final = "guess_request"

# Commands
COMMAND_JOIN: Final = "join"
COMMAND_BET: Final = "bet"
COMMAND_GUESS: Final = "guess"
COMMAND_LEAVE: Final = "leave"

# Payload keys
KEY_NAME: Final = "name"
KEY_PLAYER: Final = "player"
KEY_OPPONENT: Final = "opponent"
KEY_MESSAGE: Final = "message"
KEY_END_STATE: Final = "end_state"
KEY_WINNING_LOCATION: Final = "winning_location"
KEY_ANSWER_ONE: Final = "answer_one"
KEY_ANSWER_TWO: Final = "answer_two"
KEY_GUESS: Final = "guess"


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    log_level: str
    relay_block_ms: int
    relay_count: int


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def settings_from_env() -> Settings:
    return Settings(
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        log_level=os.environ.get("BETONIT_LOG_LEVEL", "INFO").upper(),
        relay_block_ms=_int_from_env("BETONIT_RELAY_BLOCK_MS", 250),
        relay_count=_int_from_env("BETONIT_RELAY_COUNT", 10),
    )
