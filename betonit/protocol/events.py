from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from betonit.config import (
    EVENT_BET_REQUEST,
    EVENT_ENDGAME,
    EVENT_ERROR,
    EVENT_GUESS_REQUEST,
    EVENT_JOINED,
    KEY_END_STATE,
    KEY_WINNING_LOCATION,
)


class EndState(StrEnum):
    x_won = "X_WON"
    o_won = "O_WON"
    abandoned = "ABANDONED"


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    name_on_wire: ClassVar[str]


class Joined(_Event):
    name_on_wire: ClassVar[str] = EVENT_JOINED

    # Either "X" or "O".
    player: str
    opponent_name: str = Field(alias="opponent")


class EndGame(_Event):
    name_on_wire: ClassVar[str] = EVENT_ENDGAME

    end_state: str
    # Absent iff the game was abandoned.
    winning_location: int | None = None

    @field_validator("winning_location", mode="before")
    @classmethod
    def _reject_bool_location(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("winning_location must be an integer, not a boolean")
        return value

    @model_validator(mode="before")
    @classmethod
    def _drop_location_when_abandoned(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get(KEY_END_STATE) == EndState.abandoned.value:
            return {k: v for k, v in data.items() if k != KEY_WINNING_LOCATION}
        return data

    @model_validator(mode="after")
    def _require_location_unless_abandoned(self) -> "EndGame":
        if self.end_state != EndState.abandoned.value and self.winning_location is None:
            raise ValueError(f"winning_location is required when end_state is {self.end_state!r}")
        return self


class GameError(_Event):
    name_on_wire: ClassVar[str] = EVENT_ERROR

    message: str


class BetRequest(_Event):
    name_on_wire: ClassVar[str] = EVENT_BET_REQUEST


class GuessRequest(_Event):
    name_on_wire: ClassVar[str] = EVENT_GUESS_REQUEST


class Unrecognized(_Event):
    """Well-formed message this protocol does not know. Kept for logging only."""

    raw_payload: Any = None


Event = Joined | EndGame | GameError | BetRequest | GuessRequest | Unrecognized


@dataclass(frozen=True, slots=True)
class MalformedMessage:
    """Decode failure: not a JSON object, or a known event with bad fields."""

    text: str
    reason: str
