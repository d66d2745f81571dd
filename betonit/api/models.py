from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class JoinCommandRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)


class BetCommandRequest(BaseModel):
    answer_one: int
    answer_one_coins: int
    answer_two: int
    answer_two_coins: int


class GuessCommandRequest(BaseModel):
    guess: int


class CommandAccepted(BaseModel):
    command: str
    # Sends are fire-and-forget; this only means the command was handed to the transport.
    status: str = "queued"


class SessionPhase(StrEnum):
    not_joined = "not_joined"
    joined = "joined"
    awaiting_guess = "awaiting_guess"
    awaiting_bet = "awaiting_bet"
    ended = "ended"


class SessionState(BaseModel):
    phase: SessionPhase = SessionPhase.not_joined

    # "X" or "O", assigned by the receiver on join.
    player_symbol: str | None = None
    opponent_name: str | None = None

    # When ended.
    end_state: str | None = None
    winning_location: int | None = None

    last_error: str | None = None
    last_updated_at: datetime | None = None
