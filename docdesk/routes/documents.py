"""Template and proposal endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.database import get_db
from docdesk.entities.proposal import Proposal
from docdesk.entities.template import Template
from docdesk.schemas.documents import (
    ProposalCreate,
    ProposalRecord,
    ProposalUpdate,
    TemplateCreate,
    TemplateRecord,
    TemplateUpdate,
)

router = APIRouter(tags=["documents"])


async def _get_or_404(db: AsyncSession, model, item_id: int):
    item = await db.get(model, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"{model.__name__} {item_id} not found")
    return item


@router.get("/templates", response_model=list[TemplateRecord])
async def list_templates(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Template).order_by(Template.id))
    return result.scalars().all()


@router.post("/templates", response_model=TemplateRecord, status_code=201)
async def create_template(body: TemplateCreate, db: AsyncSession = Depends(get_db)):
    template = Template(**body.model_dump())
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return template


@router.get("/templates/{template_id}", response_model=TemplateRecord)
async def get_template(template_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_or_404(db, Template, template_id)


@router.patch("/templates/{template_id}", response_model=TemplateRecord)
async def update_template(template_id: int, body: TemplateUpdate, db: AsyncSession = Depends(get_db)):
    template = await _get_or_404(db, Template, template_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(template, field, value)
    await db.commit()
    await db.refresh(template)
    return template


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(template_id: int, db: AsyncSession = Depends(get_db)):
    template = await _get_or_404(db, Template, template_id)
    await db.delete(template)
    await db.commit()
    return Response(status_code=204)


@router.get("/proposals", response_model=list[ProposalRecord])
async def list_proposals(status: str | None = None, db: AsyncSession = Depends(get_db)):
    query = select(Proposal).order_by(Proposal.updated_at.desc(), Proposal.id.desc())
    if status:
        query = query.where(Proposal.status == status)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/proposals", response_model=ProposalRecord, status_code=201)
async def create_proposal(body: ProposalCreate, db: AsyncSession = Depends(get_db)):
    await _get_or_404(db, Template, body.template_id)
    data = body.model_dump()
    data["status"] = body.status.value
    proposal = Proposal(**data)
    db.add(proposal)
    await db.commit()
    await db.refresh(proposal)
    return proposal


@router.get("/proposals/{proposal_id}", response_model=ProposalRecord)
async def get_proposal(proposal_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_or_404(db, Proposal, proposal_id)


@router.patch("/proposals/{proposal_id}", response_model=ProposalRecord)
async def update_proposal(proposal_id: int, body: ProposalUpdate, db: AsyncSession = Depends(get_db)):
    proposal = await _get_or_404(db, Proposal, proposal_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        changes["status"] = body.status.value
    for field, value in changes.items():
        setattr(proposal, field, value)
    await db.commit()
    await db.refresh(proposal)
    return proposal


@router.delete("/proposals/{proposal_id}", status_code=204)
async def delete_proposal(proposal_id: int, db: AsyncSession = Depends(get_db)):
    proposal = await _get_or_404(db, Proposal, proposal_id)
    await db.delete(proposal)
    await db.commit()
    return Response(status_code=204)
