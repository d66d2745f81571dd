from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from betonit.config import COMMAND_BET, COMMAND_GUESS, COMMAND_JOIN, COMMAND_LEAVE


class _Command(BaseModel):
    # Strict: "3" is not an int here. Amounts are only checked structurally.
    model_config = ConfigDict(frozen=True, strict=True)

    name_on_wire: ClassVar[str]


class Join(_Command):
    name_on_wire: ClassVar[str] = COMMAND_JOIN

    name: str


class Bet(_Command):
    """Two answers, each with the number of coins placed on it."""

    name_on_wire: ClassVar[str] = COMMAND_BET

    answer_one: int
    answer_one_coins: int
    answer_two: int
    answer_two_coins: int


class Guess(_Command):
    name_on_wire: ClassVar[str] = COMMAND_GUESS

    guess: int


class Leave(_Command):
    name_on_wire: ClassVar[str] = COMMAND_LEAVE


Command = Join | Bet | Guess | Leave
