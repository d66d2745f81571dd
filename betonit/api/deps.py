from __future__ import annotations

from fastapi import Depends, HTTPException, status

from betonit.peer import PeerConnection, PeerHub, hub


def get_hub() -> PeerHub:
    return hub


def require_peer(peers: PeerHub = Depends(get_hub)) -> PeerConnection:
    conn = peers.current()
    if conn is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No peer connected")
    return conn
