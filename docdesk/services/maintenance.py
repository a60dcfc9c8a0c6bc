"""Bulk maintenance over the runtime tables: wiping data and id sequences."""

from __future__ import annotations

import logging

from sqlalchemy import delete, text
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.entities import (
    AppSettings,
    GameSession,
    LeaderboardEntry,
    Player,
    Proposal,
    Snapshot,
    Template,
)

logger = logging.getLogger(__name__)

# Children before parents.
GAME_MODELS = (LeaderboardEntry, GameSession, Player)
DOCUMENT_MODELS = (Snapshot, Proposal, Template, AppSettings)


async def realign_id_sequence(db: AsyncSession, table: str) -> None:
    """Point a Postgres serial sequence just past the table's highest id."""
    if db.get_bind().dialect.name != "postgresql":
        return
    await db.execute(
        text(
            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
            f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
        )
    )


async def reset_runtime_data(db: AsyncSession, game_only: bool = False) -> dict[str, int]:
    """Delete every row from the runtime tables in one transaction.

    Returns removed row counts keyed by table name. Id sequences restart at
    1 so a wiped database numbers rows the way a fresh one does.
    """
    models = GAME_MODELS if game_only else GAME_MODELS + DOCUMENT_MODELS
    removed: dict[str, int] = {}
    try:
        for model in models:
            result = await db.execute(delete(model))
            removed[model.__tablename__] = result.rowcount or 0
            await realign_id_sequence(db, model.__tablename__)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    db.expunge_all()
    logger.info("Reset runtime data: %s", ", ".join(f"{t}={n}" for t, n in removed.items()))
    return removed
