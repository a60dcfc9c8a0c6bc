"""Game endpoints: players, sessions, and the leaderboard."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.database import get_db
from docdesk.entities.player import Player
from docdesk.schemas.game import (
    GameSessionResponse,
    LeaderboardEntryResponse,
    PlayerCreate,
    PlayerResponse,
    RebuildResponse,
    SessionComplete,
    SessionStart,
)
from docdesk.services.errors import InvalidStateTransition, NotFound, ValidationFailure
from docdesk.services.ranking import (
    complete_session,
    get_leaderboard,
    rebuild_leaderboard,
    register_player,
    start_session,
)

router = APIRouter(prefix="/game", tags=["game"])


@router.post("/players", response_model=PlayerResponse, status_code=201)
async def create_player(body: PlayerCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await register_player(db, body.username, body.avatar, body.tech_level)
    except ValidationFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/players/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: int, db: AsyncSession = Depends(get_db)):
    player = await db.get(Player, player_id)
    if player is None:
        raise HTTPException(status_code=404, detail=f"Player {player_id} not found")
    return player


@router.post("/sessions", response_model=GameSessionResponse, status_code=201)
async def create_session(body: SessionStart, db: AsyncSession = Depends(get_db)):
    try:
        return await start_session(db, body.player_id, body.tech_level, body.scenarios_played)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/sessions/{session_id}/complete", response_model=LeaderboardEntryResponse)
async def complete(session_id: int, body: SessionComplete, db: AsyncSession = Depends(get_db)):
    """Complete a session and return the player's updated leaderboard entry."""
    try:
        return await complete_session(db, session_id, body.total_score)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidStateTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValidationFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
async def leaderboard(
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    return await get_leaderboard(db, limit)


@router.post("/leaderboard/rebuild", response_model=RebuildResponse)
async def rebuild(db: AsyncSession = Depends(get_db)):
    """Recreate every leaderboard entry from player totals."""
    return RebuildResponse(entries=await rebuild_leaderboard(db))
