"""Restore engine: replace the live document tables with a snapshot.

Both tables are replaced in one transaction. A half-restored document set
(templates swapped, proposals not) is never committed.

Two concurrent restores are not coordinated: whichever commits last wins,
and the other's effect is overwritten without a conflict being reported.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.entities.proposal import Proposal
from docdesk.entities.template import Template
from docdesk.schemas.documents import SnapshotPayload
from docdesk.services.errors import DocdeskError, NotFound, TransactionFailure
from docdesk.services.maintenance import realign_id_sequence
from docdesk.services.retention import pinned
from docdesk.services.snapshots import get_snapshot, load_payload

logger = logging.getLogger(__name__)


async def _replace_documents(db: AsyncSession, payload: SnapshotPayload) -> None:
    await db.execute(delete(Template))
    template_rows = [record.model_dump() for record in payload.templates]
    if template_rows:
        await db.execute(insert(Template), template_rows)
    await realign_id_sequence(db, Template.__tablename__)

    await db.execute(delete(Proposal))
    proposal_rows = [record.model_dump() for record in payload.proposals]
    if proposal_rows:
        await db.execute(insert(Proposal), proposal_rows)
    await realign_id_sequence(db, Proposal.__tablename__)


async def apply_snapshot(db: AsyncSession, snapshot_id: int) -> SnapshotPayload:
    """Restore a snapshot, raising on any failure.

    Raises NotFound, ValidationFailure, or TransactionFailure. On
    TransactionFailure the session has been rolled back and the live
    tables are untouched.
    """
    with pinned(snapshot_id):
        snapshot = await get_snapshot(db, snapshot_id)
        if snapshot is None:
            raise NotFound(f"Snapshot {snapshot_id} not found")
        payload = load_payload(snapshot)

        try:
            await _replace_documents(db, payload)
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            raise TransactionFailure(f"Restore of snapshot {snapshot_id} rolled back: {exc}") from exc

    # Restored rows replace whatever the identity map held for these tables.
    db.expunge_all()
    logger.info(
        "Restored snapshot %d: %d templates, %d proposals",
        snapshot_id, len(payload.templates), len(payload.proposals),
    )
    return payload


async def restore_snapshot(db: AsyncSession, snapshot_id: int) -> bool:
    """Restore a snapshot; True only if both tables were replaced and committed."""
    try:
        await apply_snapshot(db, snapshot_id)
    except DocdeskError as exc:
        logger.error("Restore of snapshot %d failed: %s", snapshot_id, exc)
        return False
    return True
