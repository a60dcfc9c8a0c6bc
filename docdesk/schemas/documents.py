"""Pydantic schemas for templates, proposals, and snapshot payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from docdesk.entities.proposal import ProposalStatus


class TemplateCreate(BaseModel):
    name: str
    description: str
    content: Any
    icon: str
    color: str


class TemplateUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    content: Any = None
    icon: str | None = None
    color: str | None = None


class TemplateRecord(BaseModel):
    """A template exactly as stored; also the snapshot payload shape."""

    id: int
    name: str
    description: str
    content: Any
    icon: str
    color: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProposalCreate(BaseModel):
    title: str
    client_name: str
    status: ProposalStatus = ProposalStatus.DRAFT
    template_id: int
    content: Any


class ProposalUpdate(BaseModel):
    title: str | None = None
    client_name: str | None = None
    status: ProposalStatus | None = None
    template_id: int | None = None
    content: Any = None


class ProposalRecord(BaseModel):
    """A proposal exactly as stored; also the snapshot payload shape."""

    id: int
    title: str
    client_name: str
    status: str
    template_id: int
    content: Any
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class SnapshotPayload(BaseModel):
    templates: list[TemplateRecord] = Field(default_factory=list)
    proposals: list[ProposalRecord] = Field(default_factory=list)
