"""Seed default templates, settings, and a sample proposal for a fresh install."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docdesk.entities.proposal import Proposal, ProposalStatus
from docdesk.entities.template import Template
from docdesk.services.policy import get_app_settings

TEMPLATES = [
    {
        "name": "Executive Proposal",
        "description": "Concise proposal for senior stakeholders",
        "icon": "ri-briefcase-line",
        "color": "blue",
        "content": {
            "sections": [
                {"title": "Executive Summary", "body": ""},
                {"title": "Objectives", "body": ""},
                {"title": "Investment", "body": ""},
            ]
        },
    },
    {
        "name": "Project Quote",
        "description": "Itemized quote with timeline and deliverables",
        "icon": "ri-file-list-3-line",
        "color": "green",
        "content": {
            "sections": [
                {"title": "Scope", "body": ""},
                {"title": "Deliverables", "body": ""},
                {"title": "Timeline", "body": ""},
                {"title": "Pricing", "body": ""},
            ]
        },
    },
    {
        "name": "Service Agreement",
        "description": "Recurring services with terms and conditions",
        "icon": "ri-shake-hands-line",
        "color": "purple",
        "content": {
            "sections": [
                {"title": "Services", "body": ""},
                {"title": "Service Levels", "body": ""},
                {"title": "Terms", "body": ""},
            ]
        },
    },
]


async def seed_data(db: AsyncSession):
    """Create defaults for any empty table; existing data is left alone."""
    await get_app_settings(db)

    template_count = await db.scalar(select(func.count(Template.id)))
    if not template_count:
        for template_data in TEMPLATES:
            db.add(Template(**template_data))
        await db.flush()

    proposal_count = await db.scalar(select(func.count(Proposal.id)))
    if not proposal_count:
        first = await db.scalar(select(Template).order_by(Template.id).limit(1))
        db.add(Proposal(
            title="Website Redesign",
            client_name="Acme Corp",
            status=ProposalStatus.DRAFT.value,
            template_id=first.id,
            content=first.content,
        ))

    await db.commit()
