"""Read and update the system-wide settings row and its retention policy."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.config import settings
from docdesk.entities.app_settings import AppSettings
from docdesk.schemas.snapshots import RetentionPolicy

logger = logging.getLogger(__name__)


async def get_app_settings(db: AsyncSession) -> AppSettings:
    """Return the settings row, creating it from configured defaults if absent."""
    result = await db.execute(select(AppSettings).order_by(AppSettings.id).limit(1))
    row = result.scalar_one_or_none()
    if row is not None:
        return row

    row = AppSettings(
        backup_time=settings.default_backup_time,
        backup_enabled=settings.default_backup_enabled,
        max_backups=settings.default_max_backups,
        company_name="Your Company",
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    logger.info("Created default settings (backup at %s, keep %d)", row.backup_time, row.max_backups)
    return row


def policy_from_settings(row: AppSettings) -> RetentionPolicy:
    return RetentionPolicy(
        max_snapshots=row.max_backups,
        backup_time=row.backup_time,
        enabled=row.backup_enabled,
    )


async def get_retention_policy(db: AsyncSession) -> RetentionPolicy:
    return policy_from_settings(await get_app_settings(db))


async def update_app_settings(db: AsyncSession, changes: dict) -> AppSettings:
    """Apply a partial settings update.

    Callers that own a scheduler must re-arm it with the returned row's
    policy; this function only persists.
    """
    row = await get_app_settings(db)
    for field, value in changes.items():
        setattr(row, field, value)
    await db.commit()
    await db.refresh(row)
    logger.info(
        "Settings updated: backup_time=%s enabled=%s max_backups=%d",
        row.backup_time, row.backup_enabled, row.max_backups,
    )
    return row
