"""Tests for the restore engine."""

import json

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from docdesk.database import Base
from docdesk.entities import Proposal, Snapshot, Template
from docdesk.schemas.documents import ProposalRecord, TemplateRecord
from docdesk.services.errors import NotFound, TransactionFailure, ValidationFailure
from docdesk.services.restore import apply_snapshot, restore_snapshot
from docdesk.services.retention import is_pinned
from docdesk.services.snapshots import create_snapshot


test_engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
TestSession = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="session", autouse=True)
async def dispose_test_engine():
    yield
    await test_engine.dispose()


async def _seed_documents():
    async with TestSession() as db:
        for i, color in enumerate(["blue", "green"]):
            db.add(Template(
                name=f"Template {i}", description="desc", content={"sections": [i]},
                icon="ri-file-line", color=color,
            ))
        await db.flush()
        db.add(Proposal(title="Alpha", client_name="Acme", status="draft", template_id=1, content={"a": 1}))
        db.add(Proposal(title="Beta", client_name="Globex", status="sent", template_id=2, content={"b": [1, 2]}))
        await db.commit()


async def _document_state():
    async with TestSession() as db:
        templates = (await db.execute(select(Template).order_by(Template.id))).scalars().all()
        proposals = (await db.execute(select(Proposal).order_by(Proposal.id))).scalars().all()
        return (
            [TemplateRecord.model_validate(t).model_dump() for t in templates],
            [ProposalRecord.model_validate(p).model_dump() for p in proposals],
        )


async def _mutate_documents():
    async with TestSession() as db:
        db.add(Template(name="Extra", description="x", content={}, icon="i", color="red"))
        alpha = (await db.execute(select(Proposal).where(Proposal.title == "Alpha"))).scalar_one()
        alpha.status = "approved"
        beta = (await db.execute(select(Proposal).where(Proposal.title == "Beta"))).scalar_one()
        await db.delete(beta)
        await db.commit()


class TestRoundTrip:
    @pytest.mark.asyncio
    async def test_restore_reproduces_documents(self):
        await _seed_documents()
        before = await _document_state()
        async with TestSession() as db:
            snap = await create_snapshot(db)

        await _mutate_documents()
        assert await _document_state() != before

        async with TestSession() as db:
            assert await restore_snapshot(db, snap.id) is True

        assert await _document_state() == before

    @pytest.mark.asyncio
    async def test_restore_preserves_ids(self):
        await _seed_documents()
        async with TestSession() as db:
            snap = await create_snapshot(db)
            await db.execute(Template.__table__.delete())
            await db.commit()
            db.add(Template(name="New", description="n", content={}, icon="i", color="c"))
            await db.commit()

        async with TestSession() as db:
            payload = await apply_snapshot(db, snap.id)

        templates, _ = await _document_state()
        assert [t["id"] for t in templates] == [t.id for t in payload.templates]

    @pytest.mark.asyncio
    async def test_restore_empty_snapshot_clears_tables(self):
        async with TestSession() as db:
            snap = await create_snapshot(db)
        await _seed_documents()

        async with TestSession() as db:
            assert await restore_snapshot(db, snap.id) is True
        assert await _document_state() == ([], [])

    @pytest.mark.asyncio
    async def test_snapshot_unpinned_after_restore(self):
        async with TestSession() as db:
            snap = await create_snapshot(db)
            await apply_snapshot(db, snap.id)
        assert is_pinned(snap.id) is False


class TestRestoreFailures:
    @pytest.mark.asyncio
    async def test_missing_snapshot(self):
        async with TestSession() as db:
            assert await restore_snapshot(db, 999) is False
            with pytest.raises(NotFound):
                await apply_snapshot(db, 999)

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        await _seed_documents()
        before = await _document_state()
        async with TestSession() as db:
            snap = Snapshot(name="bad", kind="manual", size="9 B", data="not json")
            db.add(snap)
            await db.commit()

            assert await restore_snapshot(db, snap.id) is False
            with pytest.raises(ValidationFailure):
                await apply_snapshot(db, snap.id)
        assert await _document_state() == before

    @pytest.mark.asyncio
    async def test_payload_with_wrong_shape(self):
        async with TestSession() as db:
            data = json.dumps({"templates": [{"id": 1}], "proposals": []})
            snap = Snapshot(name="partial", kind="manual", size="1 B", data=data)
            db.add(snap)
            await db.commit()
            with pytest.raises(ValidationFailure):
                await apply_snapshot(db, snap.id)

    @pytest.mark.asyncio
    async def test_failure_mid_restore_leaves_templates_untouched(self):
        """A duplicate proposal id fails after templates were replaced; nothing commits."""
        await _seed_documents()
        before = await _document_state()

        template = {
            "id": 50, "name": "Snapshot template", "description": "d", "content": {},
            "icon": "i", "color": "c", "created_at": None,
        }
        proposal = {
            "id": 7, "title": "Dup", "client_name": "X", "status": "draft", "template_id": 50,
            "content": {}, "created_at": None, "updated_at": None,
        }
        data = json.dumps({"templates": [template], "proposals": [proposal, proposal]})
        async with TestSession() as db:
            snap = Snapshot(name="conflict", kind="manual", size="1 B", data=data)
            db.add(snap)
            await db.commit()
            snap_id = snap.id

        async with TestSession() as db:
            assert await restore_snapshot(db, snap_id) is False
        assert await _document_state() == before

        async with TestSession() as db:
            with pytest.raises(TransactionFailure):
                await apply_snapshot(db, snap_id)
        assert await _document_state() == before
        assert is_pinned(snap_id) is False
