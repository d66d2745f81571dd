from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from betonit.config import (
    KEY_ANSWER_ONE,
    KEY_ANSWER_TWO,
    KEY_COMMAND,
    KEY_EVENT,
    KEY_GUESS,
    KEY_NAME,
)
from betonit.protocol.commands import Bet, Command, Guess, Join, Leave
from betonit.protocol.errors import EncodeError
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

_EVENT_MODELS: dict[str, type[Joined | EndGame | GameError | BetRequest | GuessRequest]] = {
    model.name_on_wire: model for model in (Joined, EndGame, GameError, BetRequest, GuessRequest)
}


def command_to_wire(command: Command) -> dict[str, Any]:
    """Build the flat wire object for a command; `command` is always the first key."""

    payload: dict[str, Any] = {KEY_COMMAND: command.name_on_wire}
    if isinstance(command, Join):
        payload[KEY_NAME] = command.name
    elif isinstance(command, Bet):
        payload[KEY_ANSWER_ONE] = [command.answer_one, command.answer_one_coins]
        payload[KEY_ANSWER_TWO] = [command.answer_two, command.answer_two_coins]
    elif isinstance(command, Guess):
        payload[KEY_GUESS] = command.guess
    elif isinstance(command, Leave):
        pass
    else:
        raise EncodeError(f"Unknown command type: {type(command).__name__}")
    return payload


def encode_command(command: Command) -> str:
    payload = command_to_wire(command)
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Cannot serialize {command.name_on_wire} command: {e}") from e


def decode_event(text: str) -> Event | MalformedMessage:
    """Decode inbound wire text. Never raises.

    - not JSON, or JSON that isn't an object -> MalformedMessage
    - object without `event`, or with an unknown `event` value -> Unrecognized
    - known event with missing/mistyped fields -> MalformedMessage
    """

    try:
        payload = json.loads(text)
    except (ValueError, TypeError, RecursionError) as e:
        return MalformedMessage(text=str(text), reason=f"Invalid JSON: {e}")

    if not isinstance(payload, dict):
        return MalformedMessage(text=text, reason="Expected a JSON object")

    if KEY_EVENT not in payload:
        return Unrecognized(raw_payload=payload)

    name = payload[KEY_EVENT]
    model = _EVENT_MODELS.get(name) if isinstance(name, str) else None
    if model is None:
        return Unrecognized(raw_payload=payload)

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or name}: {err['msg']}" for err in e.errors()
        )
        return MalformedMessage(text=text, reason=f"Bad '{name}' event: {problems}")
