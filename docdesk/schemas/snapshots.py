"""Pydantic schemas for snapshot and settings endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from docdesk.entities.snapshot import SnapshotKind
from docdesk.schemas.documents import SnapshotPayload

TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SnapshotCreate(BaseModel):
    name: str | None = None
    kind: SnapshotKind = SnapshotKind.MANUAL


class SnapshotResponse(BaseModel):
    id: int
    name: str
    kind: str
    size: str
    created_at: datetime

    model_config = {"from_attributes": True}


class SnapshotDetail(SnapshotResponse):
    payload: SnapshotPayload


class RestoreResponse(BaseModel):
    message: str
    snapshot_id: int


class RetentionPolicy(BaseModel):
    """How many snapshots to keep and when the daily one is taken."""

    max_snapshots: int = Field(ge=1)
    backup_time: str = Field(pattern=TIME_OF_DAY_PATTERN)
    enabled: bool = True

    @property
    def hour(self) -> int:
        return int(self.backup_time.split(":")[0])

    @property
    def minute(self) -> int:
        return int(self.backup_time.split(":")[1])


class SettingsResponse(BaseModel):
    backup_time: str
    backup_enabled: bool
    max_backups: int
    company_name: str
    company_logo: str | None = None
    company_address: str | None = None
    company_email: str | None = None
    company_phone: str | None = None

    model_config = {"from_attributes": True}


class SettingsUpdate(BaseModel):
    backup_time: str | None = Field(default=None, pattern=TIME_OF_DAY_PATTERN)
    backup_enabled: bool | None = None
    max_backups: int | None = Field(default=None, ge=1)
    company_name: str | None = None
    company_logo: str | None = None
    company_address: str | None = None
    company_email: str | None = None
    company_phone: str | None = None
