"""Settings endpoints. Updating settings re-arms the backup scheduler."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.database import get_db
from docdesk.schemas.snapshots import SettingsResponse, SettingsUpdate
from docdesk.services.policy import get_app_settings, policy_from_settings, update_app_settings
from docdesk.services.scheduler import BackupScheduler

router = APIRouter(prefix="/settings", tags=["settings"])


def get_scheduler(request: Request) -> BackupScheduler:
    return request.app.state.scheduler


@router.get("", response_model=SettingsResponse)
async def read_settings(db: AsyncSession = Depends(get_db)):
    return await get_app_settings(db)


@router.put("", response_model=SettingsResponse)
async def write_settings(
    body: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
    scheduler: BackupScheduler = Depends(get_scheduler),
):
    """Update settings and reschedule automatic backups."""
    row = await update_app_settings(db, body.model_dump(exclude_unset=True))
    await scheduler.arm(policy_from_settings(row))
    return row
