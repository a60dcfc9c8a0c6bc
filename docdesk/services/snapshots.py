"""Snapshot builder: serialize the document set into one immutable row."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from docdesk.entities.proposal import Proposal
from docdesk.entities.snapshot import Snapshot, SnapshotKind
from docdesk.entities.template import Template
from docdesk.schemas.documents import ProposalRecord, SnapshotPayload, TemplateRecord
from docdesk.services.errors import StorageUnavailable, TransactionFailure, ValidationFailure
from docdesk.services.policy import get_retention_policy
from docdesk.services.retention import enforce_retention

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("KB", "MB", "GB")


def format_size(num_bytes: int) -> str:
    """Render a byte count the way snapshot sizes have always been shown.

    >>> format_size(500), format_size(2048), format_size(1048576)
    ('500 B', '2.00 KB', '1.00 MB')
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    value = num_bytes / 1024
    for unit in _SIZE_UNITS[:-1]:
        if value < 1024:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} {_SIZE_UNITS[-1]}"


def manual_snapshot_name(now: datetime) -> str:
    return f"Backup {now:%Y-%m-%d %H:%M:%S}"


def scheduled_snapshot_name(now: datetime) -> str:
    """e.g. "October 18, 2026 - 11:00 PM"."""
    hour = now.hour % 12 or 12
    return f"{now:%B} {now.day}, {now.year} - {hour}:{now:%M %p}"


async def build_payload(db: AsyncSession) -> SnapshotPayload:
    """Copy every template and proposal into detached payload records."""
    templates = await db.execute(select(Template).order_by(Template.id))
    proposals = await db.execute(select(Proposal).order_by(Proposal.id))
    return SnapshotPayload(
        templates=[TemplateRecord.model_validate(t) for t in templates.scalars().all()],
        proposals=[ProposalRecord.model_validate(p) for p in proposals.scalars().all()],
    )


def load_payload(snapshot: Snapshot) -> SnapshotPayload:
    """Parse a stored snapshot blob. Raises ValidationFailure if unusable."""
    if not snapshot.data:
        raise ValidationFailure(f"Snapshot {snapshot.id} has no payload")
    try:
        return SnapshotPayload.model_validate_json(snapshot.data)
    except ValidationError as exc:
        raise ValidationFailure(f"Snapshot {snapshot.id} payload is malformed: {exc}") from exc


async def create_snapshot(
    db: AsyncSession,
    name: str | None = None,
    kind: SnapshotKind = SnapshotKind.MANUAL,
) -> Snapshot:
    """Persist a new snapshot of the current documents, then apply retention.

    Raises TransactionFailure if the snapshot could not be written; in that
    case no snapshot row exists. Retention problems are logged only.
    """
    now = datetime.now(timezone.utc)
    if not name:
        name = scheduled_snapshot_name(now) if kind == SnapshotKind.SCHEDULED else manual_snapshot_name(now)

    try:
        payload = await build_payload(db)
        blob = payload.model_dump_json()
        snapshot = Snapshot(
            name=name,
            kind=kind.value,
            size=format_size(len(blob.encode("utf-8"))),
            data=blob,
            created_at=now,
        )
        db.add(snapshot)
        await db.commit()
        await db.refresh(snapshot)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Failed to create %s snapshot %r", kind.value, name)
        raise TransactionFailure(f"Snapshot creation failed: {exc}") from exc

    logger.info(
        "Created %s snapshot %d %r (%s, %d templates, %d proposals)",
        kind.value, snapshot.id, snapshot.name, snapshot.size,
        len(payload.templates), len(payload.proposals),
    )

    try:
        policy = await get_retention_policy(db)
        await enforce_retention(db, policy.max_snapshots)
    except (StorageUnavailable, SQLAlchemyError) as exc:
        logger.warning("Retention after snapshot %d failed (non-fatal): %s", snapshot.id, exc)

    return snapshot


async def list_snapshots(db: AsyncSession) -> list[Snapshot]:
    """Newest first, without loading payload blobs."""
    result = await db.execute(
        select(Snapshot)
        .options(defer(Snapshot.data))
        .order_by(Snapshot.created_at.desc(), Snapshot.id.desc())
    )
    return list(result.scalars().all())


async def get_snapshot(db: AsyncSession, snapshot_id: int) -> Snapshot | None:
    # populate_existing: a listed (deferred) instance may already be in the identity map.
    result = await db.execute(
        select(Snapshot)
        .where(Snapshot.id == snapshot_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def delete_snapshot(db: AsyncSession, snapshot_id: int) -> bool:
    result = await db.execute(delete(Snapshot).where(Snapshot.id == snapshot_id))
    await db.commit()
    deleted = (result.rowcount or 0) > 0
    if deleted:
        logger.info("Deleted snapshot %d", snapshot_id)
    return deleted
