from __future__ import annotations

from betonit.api.models import SessionPhase, SessionState
from betonit.fsm import SessionFSM
from betonit.protocol.channel import ChannelProtocol
from betonit.session import GameSession

from tests.fakes import FakeTransport


def test_fsm_starts_from_model_phase() -> None:
    state = SessionState(phase=SessionPhase.awaiting_bet)
    fsm = SessionFSM(state)

    fsm.guess_requested()
    fsm.sync_phase_to_model()

    assert state.phase == SessionPhase.awaiting_guess


def test_full_round_through_protocol(transport: FakeTransport) -> None:
    session = GameSession()
    protocol = ChannelProtocol(session, transport)

    protocol.on_message('{"event":"joined","player":"O","opponent":"Alice"}')
    assert session.snapshot().phase == SessionPhase.joined

    protocol.on_message('{"event":"guess_request"}')
    assert session.snapshot().phase == SessionPhase.awaiting_guess

    protocol.on_message('{"event":"bet_request"}')
    assert session.snapshot().phase == SessionPhase.awaiting_bet

    protocol.on_message('{"event":"endgame","end_state":"O_WON","winning_location":3}')
    final = session.snapshot()
    assert final.phase == SessionPhase.ended
    assert final.player_symbol == "O"
    assert final.opponent_name == "Alice"
    assert final.end_state == "O_WON"
    assert final.winning_location == 3


def test_requests_before_join_keep_phase() -> None:
    session = GameSession()

    session.on_bet_request()
    session.on_guess_request()

    assert session.snapshot().phase == SessionPhase.not_joined
    assert session.snapshot().last_updated_at is not None


def test_second_joined_updates_opponent_without_resetting_phase() -> None:
    session = GameSession()
    session.on_game_joined("X", "")
    session.on_guess_request()

    session.on_game_joined("X", "Bob")

    snap = session.snapshot()
    assert snap.phase == SessionPhase.awaiting_guess
    assert snap.opponent_name == "Bob"


def test_abandoned_game_has_no_location() -> None:
    session = GameSession()
    session.on_game_joined("X", "Bob")

    session.on_game_end("ABANDONED", -1)

    snap = session.snapshot()
    assert snap.phase == SessionPhase.ended
    assert snap.winning_location is None


def test_events_after_end_are_ignored() -> None:
    session = GameSession()
    session.on_game_end("ABANDONED", -1)

    session.on_game_joined("X", "Bob")
    session.on_bet_request()

    assert session.snapshot().phase == SessionPhase.ended


def test_game_errors_are_recorded() -> None:
    session = GameSession()

    session.on_game_error("Game is full")

    assert session.snapshot().last_error == "Game is full"
    assert session.snapshot().phase == SessionPhase.not_joined


def test_snapshot_is_a_copy() -> None:
    session = GameSession()
    snap = session.snapshot()
    snap.phase = SessionPhase.ended

    assert session.snapshot().phase == SessionPhase.not_joined
