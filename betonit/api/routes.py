from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from betonit.api.deps import get_hub, require_peer
from betonit.api.models import (
    BetCommandRequest,
    CommandAccepted,
    GuessCommandRequest,
    JoinCommandRequest,
    SessionState,
)
from betonit.config import COMMAND_BET, COMMAND_GUESS, COMMAND_JOIN, COMMAND_LEAVE
from betonit.peer import PeerConnection, PeerHub
from betonit.transports.websocket import parse_envelope

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/peer")
async def peer_ws(websocket: WebSocket, peers: PeerHub = Depends(get_hub)) -> None:
    conn = await peers.connect(websocket)

    try:
        while True:
            text = await websocket.receive_text()
            envelope = parse_envelope(text)
            if envelope is None:
                continue
            conn.protocol.receive(envelope.namespace, envelope.message)
    except WebSocketDisconnect:
        logger.info("Peer disconnected")
        await peers.disconnect(conn)
    except Exception:
        await peers.disconnect(conn)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/commands/join", response_model=CommandAccepted, status_code=status.HTTP_202_ACCEPTED)
async def join_route(payload: JoinCommandRequest, conn: PeerConnection = Depends(require_peer)) -> CommandAccepted:
    conn.protocol.join(payload.name)
    return CommandAccepted(command=COMMAND_JOIN)


@router.post("/commands/bet", response_model=CommandAccepted, status_code=status.HTTP_202_ACCEPTED)
async def bet_route(payload: BetCommandRequest, conn: PeerConnection = Depends(require_peer)) -> CommandAccepted:
    conn.protocol.bet(payload.answer_one, payload.answer_one_coins, payload.answer_two, payload.answer_two_coins)
    return CommandAccepted(command=COMMAND_BET)


@router.post("/commands/guess", response_model=CommandAccepted, status_code=status.HTTP_202_ACCEPTED)
async def guess_route(payload: GuessCommandRequest, conn: PeerConnection = Depends(require_peer)) -> CommandAccepted:
    conn.protocol.guess(payload.guess)
    return CommandAccepted(command=COMMAND_GUESS)


@router.post("/commands/leave", response_model=CommandAccepted, status_code=status.HTTP_202_ACCEPTED)
async def leave_route(conn: PeerConnection = Depends(require_peer)) -> CommandAccepted:
    conn.protocol.leave()
    return CommandAccepted(command=COMMAND_LEAVE)


@router.get("/session", response_model=SessionState)
async def session_route(conn: PeerConnection = Depends(require_peer)) -> SessionState:
    return conn.session.snapshot()
