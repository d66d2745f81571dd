from __future__ import annotations

from statemachine import State, StateMachine

from betonit.api.models import SessionPhase, SessionState


class SessionFSM(StateMachine):
    """FSM wrapper around SessionState.

    The receiver drives the game, so transitions are permissive: guess and bet
    requests may repeat or alternate in whatever order the peer sends them.
    """

    not_joined = State(SessionPhase.not_joined.value, value=SessionPhase.not_joined.value, initial=True)
    joined = State(SessionPhase.joined.value, value=SessionPhase.joined.value)
    awaiting_guess = State(SessionPhase.awaiting_guess.value, value=SessionPhase.awaiting_guess.value)
    awaiting_bet = State(SessionPhase.awaiting_bet.value, value=SessionPhase.awaiting_bet.value)
    ended = State(SessionPhase.ended.value, value=SessionPhase.ended.value, final=True)

    # A second `joined` announces the opponent; it doesn't reset the phase.
    join = (
        not_joined.to(joined)
        | joined.to.itself()
        | awaiting_guess.to.itself()
        | awaiting_bet.to.itself()
    )
    guess_requested = joined.to(awaiting_guess) | awaiting_bet.to(awaiting_guess) | awaiting_guess.to.itself()
    bet_requested = joined.to(awaiting_bet) | awaiting_guess.to(awaiting_bet) | awaiting_bet.to.itself()
    game_over = (
        not_joined.to(ended)
        | joined.to(ended)
        | awaiting_guess.to(ended)
        | awaiting_bet.to(ended)
    )

    def __init__(self, session: SessionState):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state.value))
