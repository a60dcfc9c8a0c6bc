"""Snapshot retention: keep the newest N snapshots, evict the rest.

Eviction is best-effort. Each deletion commits on its own, and a failed
deletion is logged and skipped so the remaining excess is still evicted.
Snapshots pinned by an in-flight restore are never evicted; they are picked
up by the next run instead.
"""

from __future__ import annotations

import logging
from collections import Counter
from contextlib import contextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.entities.snapshot import Snapshot
from docdesk.services.errors import StorageUnavailable

logger = logging.getLogger(__name__)

_pins: Counter[int] = Counter()


@contextmanager
def pinned(snapshot_id: int):
    """Protect a snapshot from eviction while it is being read."""
    _pins[snapshot_id] += 1
    try:
        yield
    finally:
        _pins[snapshot_id] -= 1
        if _pins[snapshot_id] <= 0:
            del _pins[snapshot_id]


def is_pinned(snapshot_id: int) -> bool:
    return _pins[snapshot_id] > 0


async def enforce_retention(db: AsyncSession, max_snapshots: int) -> list[int]:
    """Delete the oldest snapshots beyond ``max_snapshots``.

    Oldest means lowest ``created_at``, then lowest id. Returns the ids that
    were actually deleted. Raises StorageUnavailable only if the snapshot
    list itself cannot be read.
    """
    if max_snapshots < 1:
        raise ValueError(f"max_snapshots must be positive, got {max_snapshots}")

    try:
        result = await db.execute(
            select(Snapshot.id).order_by(Snapshot.created_at.asc(), Snapshot.id.asc())
        )
        ordered_ids = list(result.scalars().all())
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageUnavailable(f"Could not list snapshots: {exc}") from exc

    excess = len(ordered_ids) - max_snapshots
    if excess <= 0:
        return []

    deleted: list[int] = []
    for snapshot_id in ordered_ids[:excess]:
        if is_pinned(snapshot_id):
            logger.info("Snapshot %d is being restored; deferring eviction", snapshot_id)
            continue
        try:
            await db.execute(delete(Snapshot).where(Snapshot.id == snapshot_id))
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("Failed to evict snapshot %d (continuing): %s", snapshot_id, exc)
            continue
        deleted.append(snapshot_id)

    if deleted:
        logger.info("Retention evicted %d snapshot(s): %s", len(deleted), deleted)
    return deleted
