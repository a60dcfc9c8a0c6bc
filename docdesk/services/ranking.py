"""Leaderboard ranking engine.

Ranks are dense and 1-based over all entries, ordered by total points
descending with player id ascending as the tie-break. Every public entry
point finishes with a full rerank inside the same transaction as the score
change, so a committed entry never carries the provisional rank.

Reranking rewrites every row. Under concurrent completions for different
players the last commit decides the observed order; serialization is left
to the database's row locks.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.config import settings
from docdesk.entities.game_session import GameSession
from docdesk.entities.leaderboard_entry import LeaderboardEntry
from docdesk.entities.player import Player
from docdesk.services.errors import InvalidStateTransition, NotFound, ValidationFailure

logger = logging.getLogger(__name__)

PROVISIONAL_RANK = 0  # never a valid dense rank


async def _completed_session_count(db: AsyncSession, player_id: int) -> int:
    result = await db.execute(
        select(func.count(GameSession.id)).where(
            GameSession.player_id == player_id,
            GameSession.is_completed.is_(True),
        )
    )
    return int(result.scalar() or 0)


async def recalculate_ranks(db: AsyncSession) -> None:
    """Assign dense ranks 1..n in score order. Does not commit."""
    result = await db.execute(
        select(LeaderboardEntry).order_by(
            LeaderboardEntry.total_points.desc(),
            LeaderboardEntry.player_id.asc(),
        )
    )
    entries = result.scalars().all()
    for position, entry in enumerate(entries, start=1):
        if entry.rank != position:
            entry.rank = position
    await db.flush()


async def _upsert_entry(db: AsyncSession, player_id: int) -> None:
    player = await db.get(Player, player_id, populate_existing=True)
    if player is None:
        raise NotFound(f"Player {player_id} not found")

    games_played = await _completed_session_count(db, player_id)
    now = datetime.now(timezone.utc)

    result = await db.execute(
        select(LeaderboardEntry).where(LeaderboardEntry.player_id == player_id)
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        db.add(LeaderboardEntry(
            player_id=player.id,
            username=player.username,
            avatar=player.avatar,
            total_points=player.total_points,
            tech_level=player.tech_level,
            rank=PROVISIONAL_RANK,
            games_played=games_played,
            last_updated=now,
        ))
    else:
        entry.username = player.username
        entry.avatar = player.avatar
        entry.total_points = player.total_points
        entry.tech_level = player.tech_level
        entry.games_played = games_played
        entry.last_updated = now
    await db.flush()


async def _entry_for(db: AsyncSession, player_id: int) -> LeaderboardEntry:
    result = await db.execute(
        select(LeaderboardEntry).where(LeaderboardEntry.player_id == player_id)
    )
    return result.scalar_one()


async def upsert_and_rerank(db: AsyncSession, player_id: int) -> LeaderboardEntry:
    """Bring one player's entry up to date and rerank everyone."""
    try:
        await _upsert_entry(db, player_id)
        await recalculate_ranks(db)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return await _entry_for(db, player_id)


async def complete_session(db: AsyncSession, session_id: int, total_score: int) -> LeaderboardEntry:
    """Close an open game session and credit its score to the player.

    The open -> completed transition is a conditional update, so two
    concurrent completions of one session cannot both succeed.
    """
    if total_score < 0:
        raise ValidationFailure(f"total_score must be non-negative, got {total_score}")

    session = await db.get(GameSession, session_id)
    if session is None:
        raise NotFound(f"Game session {session_id} not found")
    player_id = session.player_id

    try:
        result = await db.execute(
            update(GameSession)
            .where(GameSession.id == session_id, GameSession.is_completed.is_(False))
            .values(
                is_completed=True,
                end_time=datetime.now(timezone.utc),
                total_score=total_score,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateTransition(f"Game session {session_id} is already completed")

        await db.execute(
            update(Player)
            .where(Player.id == player_id)
            .values(total_points=Player.total_points + total_score)
            .execution_options(synchronize_session=False)
        )
        await _upsert_entry(db, player_id)
        await recalculate_ranks(db)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(session)
    entry = await _entry_for(db, player_id)
    logger.info(
        "Session %d completed: player %d +%d -> %d points, rank %d",
        session_id, player_id, total_score, entry.total_points, entry.rank,
    )
    return entry


async def rebuild_leaderboard(db: AsyncSession) -> int:
    """Clear the leaderboard and recreate it from player totals."""
    try:
        await db.execute(delete(LeaderboardEntry))

        counts = await db.execute(
            select(GameSession.player_id, func.count(GameSession.id))
            .where(GameSession.is_completed.is_(True))
            .group_by(GameSession.player_id)
        )
        games_by_player = dict(counts.all())

        players = await db.execute(
            select(Player).order_by(Player.id).execution_options(populate_existing=True)
        )
        now = datetime.now(timezone.utc)
        created = 0
        for player in players.scalars().all():
            db.add(LeaderboardEntry(
                player_id=player.id,
                username=player.username,
                avatar=player.avatar,
                total_points=player.total_points,
                tech_level=player.tech_level,
                rank=PROVISIONAL_RANK,
                games_played=games_by_player.get(player.id, 0),
                last_updated=now,
            ))
            created += 1
        await db.flush()
        await recalculate_ranks(db)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Leaderboard rebuilt with %d entries", created)
    return created


async def get_leaderboard(db: AsyncSession, limit: int | None = None) -> list[LeaderboardEntry]:
    if limit is None:
        limit = settings.leaderboard_size
    result = await db.execute(
        select(LeaderboardEntry)
        .order_by(LeaderboardEntry.rank.asc())
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def register_player(db: AsyncSession, username: str, avatar: str, tech_level: str = "beginner") -> Player:
    existing = await db.execute(select(Player).where(Player.username == username))
    if existing.scalar_one_or_none() is not None:
        raise ValidationFailure(f"Username {username!r} is already taken")
    player = Player(username=username, avatar=avatar, tech_level=tech_level, total_points=0)
    db.add(player)
    await db.commit()
    await db.refresh(player)
    logger.info("Registered player %d (%s)", player.id, player.username)
    return player


async def start_session(
    db: AsyncSession,
    player_id: int,
    tech_level: str | None = None,
    scenarios_played: list[int] | None = None,
) -> GameSession:
    player = await db.get(Player, player_id)
    if player is None:
        raise NotFound(f"Player {player_id} not found")
    session = GameSession(
        player_id=player_id,
        tech_level=tech_level or player.tech_level,
        scenarios_played=list(scenarios_played or []),
        total_score=0,
        is_completed=False,
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)
    return session
