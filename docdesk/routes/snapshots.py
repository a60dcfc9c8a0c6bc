"""Snapshot endpoints: create, list, inspect, restore, delete."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.database import get_db
from docdesk.schemas.snapshots import (
    RestoreResponse,
    SnapshotCreate,
    SnapshotDetail,
    SnapshotResponse,
)
from docdesk.services.errors import NotFound, TransactionFailure, ValidationFailure
from docdesk.services.restore import apply_snapshot
from docdesk.services.snapshots import (
    create_snapshot,
    delete_snapshot,
    get_snapshot,
    list_snapshots,
    load_payload,
)

router = APIRouter(prefix="/snapshots", tags=["snapshots"])


@router.get("", response_model=list[SnapshotResponse])
async def list_all(db: AsyncSession = Depends(get_db)):
    """List snapshots, newest first."""
    return await list_snapshots(db)


@router.post("", response_model=SnapshotResponse, status_code=201)
async def create(body: SnapshotCreate | None = None, db: AsyncSession = Depends(get_db)):
    """Take a snapshot of every template and proposal."""
    body = body or SnapshotCreate()
    try:
        return await create_snapshot(db, name=body.name, kind=body.kind)
    except TransactionFailure as exc:
        raise HTTPException(status_code=500, detail=f"Failed to create snapshot: {exc}")


@router.get("/{snapshot_id}", response_model=SnapshotDetail)
async def get_one(snapshot_id: int, db: AsyncSession = Depends(get_db)):
    """Get a snapshot including its document payload."""
    snapshot = await get_snapshot(db, snapshot_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Snapshot {snapshot_id} not found")
    try:
        payload = load_payload(snapshot)
    except ValidationFailure as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return SnapshotDetail(
        id=snapshot.id,
        name=snapshot.name,
        kind=snapshot.kind,
        size=snapshot.size,
        created_at=snapshot.created_at,
        payload=payload,
    )


@router.post("/{snapshot_id}/restore", response_model=RestoreResponse)
async def restore(snapshot_id: int, db: AsyncSession = Depends(get_db)):
    """Replace all templates and proposals with the snapshot's contents."""
    try:
        await apply_snapshot(db, snapshot_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationFailure as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except TransactionFailure as exc:
        raise HTTPException(status_code=500, detail=f"Failed to restore snapshot: {exc}")
    return RestoreResponse(message="Snapshot restored successfully", snapshot_id=snapshot_id)


@router.delete("/{snapshot_id}", status_code=204)
async def delete_one(snapshot_id: int, db: AsyncSession = Depends(get_db)):
    if not await delete_snapshot(db, snapshot_id):
        raise HTTPException(status_code=404, detail=f"Snapshot {snapshot_id} not found")
    return Response(status_code=204)
