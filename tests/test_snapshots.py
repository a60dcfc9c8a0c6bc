"""Tests for snapshot creation, size formatting, and retention."""

from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from unittest.mock import patch

from docdesk.database import Base
from docdesk.entities import Proposal, Snapshot, SnapshotKind, Template
from docdesk.schemas.documents import SnapshotPayload
from docdesk.services.policy import update_app_settings
from docdesk.services.retention import enforce_retention, pinned
from docdesk.services.snapshots import (
    create_snapshot,
    delete_snapshot,
    format_size,
    list_snapshots,
    scheduled_snapshot_name,
)


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
        template = Template(
            name="Executive", description="Short", content={"sections": []},
            icon="ri-briefcase-line", color="blue",
        )
        db.add(template)
        await db.flush()
        db.add(Proposal(
            title="Redesign", client_name="Acme", status="draft",
            template_id=template.id, content={"sections": [{"title": "Scope"}]},
        ))
        await db.commit()


async def _set_max(max_backups: int):
    async with TestSession() as db:
        await update_app_settings(db, {"max_backups": max_backups})


async def _snapshot_ids() -> list[int]:
    async with TestSession() as db:
        result = await db.execute(select(Snapshot.id).order_by(Snapshot.id))
        return list(result.scalars().all())


class TestFormatSize:
    def test_bytes(self):
        assert format_size(0) == "0 B"
        assert format_size(500) == "500 B"
        assert format_size(1023) == "1023 B"

    def test_kilobytes(self):
        assert format_size(1024) == "1.00 KB"
        assert format_size(2048) == "2.00 KB"
        assert format_size(12698) == "12.40 KB"

    def test_megabytes(self):
        assert format_size(1048576) == "1.00 MB"

    def test_gigabytes(self):
        assert format_size(1024 ** 3) == "1.00 GB"
        assert format_size(5 * 1024 ** 4) == "5120.00 GB"


class TestSnapshotNames:
    def test_scheduled_name(self):
        assert scheduled_snapshot_name(datetime(2026, 10, 18, 23, 0)) == "October 18, 2026 - 11:00 PM"

    def test_scheduled_name_morning(self):
        assert scheduled_snapshot_name(datetime(2026, 3, 5, 0, 7)) == "March 5, 2026 - 12:07 AM"


class TestCreateSnapshot:
    @pytest.mark.asyncio
    async def test_payload_contains_documents(self):
        await _seed_documents()
        async with TestSession() as db:
            snap = await create_snapshot(db, name="nightly", kind=SnapshotKind.MANUAL)

        assert snap.name == "nightly"
        assert snap.kind == "manual"
        payload = SnapshotPayload.model_validate_json(snap.data)
        assert [t.name for t in payload.templates] == ["Executive"]
        assert [p.title for p in payload.proposals] == ["Redesign"]
        assert payload.proposals[0].template_id == payload.templates[0].id

    @pytest.mark.asyncio
    async def test_size_matches_serialized_blob(self):
        await _seed_documents()
        async with TestSession() as db:
            snap = await create_snapshot(db)
        assert snap.size == format_size(len(snap.data.encode("utf-8")))
        assert snap.size.endswith(" B")

    @pytest.mark.asyncio
    async def test_default_names(self):
        async with TestSession() as db:
            manual = await create_snapshot(db)
            scheduled = await create_snapshot(db, kind=SnapshotKind.SCHEDULED)
        assert manual.name.startswith("Backup ")
        assert scheduled.kind == "scheduled"
        assert " - " in scheduled.name

    @pytest.mark.asyncio
    async def test_empty_document_set(self):
        async with TestSession() as db:
            snap = await create_snapshot(db)
        payload = SnapshotPayload.model_validate_json(snap.data)
        assert payload.templates == [] and payload.proposals == []

    @pytest.mark.asyncio
    async def test_payload_is_a_copy(self):
        await _seed_documents()
        async with TestSession() as db:
            snap = await create_snapshot(db)
            template = (await db.execute(select(Template))).scalar_one()
            template.name = "Renamed"
            await db.commit()

        async with TestSession() as db:
            stored = await db.get(Snapshot, snap.id)
            payload = SnapshotPayload.model_validate_json(stored.data)
        assert payload.templates[0].name == "Executive"

    @pytest.mark.asyncio
    async def test_list_newest_first(self):
        async with TestSession() as db:
            first = await create_snapshot(db, name="a")
            second = await create_snapshot(db, name="b")
            rows = await list_snapshots(db)
        assert [r.id for r in rows] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_delete_snapshot(self):
        async with TestSession() as db:
            snap = await create_snapshot(db)
            assert await delete_snapshot(db, snap.id) is True
            assert await delete_snapshot(db, snap.id) is False


class TestRetention:
    @pytest.mark.asyncio
    async def test_fourth_snapshot_evicts_oldest(self):
        async with TestSession() as db:
            ids = [(await create_snapshot(db, name=f"s{i}")).id for i in range(3)]

        await _set_max(2)
        async with TestSession() as db:
            fourth = await create_snapshot(db, name="s3")

        # Lowering the limit alone evicts nothing; the next snapshot does.
        assert await _snapshot_ids() == [ids[2], fourth.id]

    @pytest.mark.asyncio
    async def test_scenario_three_existing_max_two(self):
        async with TestSession() as db:
            for i in range(3):
                db.add(Snapshot(name=f"old{i}", kind="manual", size="2 B", data="{}"))
            await db.commit()
        oldest, second, third = await _snapshot_ids()

        await _set_max(2)
        async with TestSession() as db:
            deleted = await enforce_retention(db, 2)
        assert deleted == [oldest]
        assert await _snapshot_ids() == [second, third]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_snapshots", [1, 2, 5, 8])
    async def test_keeps_most_recent(self, max_snapshots):
        async with TestSession() as db:
            created = [(await create_snapshot(db, name=f"s{i}")).id for i in range(6)]
            await enforce_retention(db, max_snapshots)

        remaining = await _snapshot_ids()
        assert len(remaining) <= max_snapshots
        assert remaining == created[-max_snapshots:]

    @pytest.mark.asyncio
    async def test_idempotent(self):
        async with TestSession() as db:
            for i in range(4):
                await create_snapshot(db, name=f"s{i}")
            first = await enforce_retention(db, 2)
            second = await enforce_retention(db, 2)
        assert len(first) == 2
        assert second == []

    @pytest.mark.asyncio
    async def test_rejects_non_positive_limit(self):
        async with TestSession() as db:
            with pytest.raises(ValueError):
                await enforce_retention(db, 0)

    @pytest.mark.asyncio
    async def test_pinned_snapshot_is_not_evicted(self):
        async with TestSession() as db:
            ids = [(await create_snapshot(db, name=f"s{i}")).id for i in range(3)]
            with pinned(ids[0]):
                deleted = await enforce_retention(db, 1)
        assert deleted == [ids[1]]
        assert await _snapshot_ids() == [ids[0], ids[2]]

        async with TestSession() as db:
            assert await enforce_retention(db, 1) == [ids[0]]

    @pytest.mark.asyncio
    async def test_failed_deletion_does_not_stop_eviction(self):
        async with TestSession() as db:
            ids = [(await create_snapshot(db, name=f"s{i}")).id for i in range(4)]

        async with TestSession() as db:
            real_commit = db.commit
            calls = 0

            async def flaky_commit():
                nonlocal calls
                calls += 1
                if calls == 1:
                    raise OperationalError("DELETE FROM snapshots", {}, Exception("database is locked"))
                await real_commit()

            with patch.object(db, "commit", flaky_commit):
                deleted = await enforce_retention(db, 2)

        assert deleted == [ids[1]]
        assert await _snapshot_ids() == [ids[0], ids[2], ids[3]]

    @pytest.mark.asyncio
    async def test_retention_uses_configured_policy(self):
        await _set_max(3)
        async with TestSession() as db:
            for i in range(5):
                await create_snapshot(db, name=f"s{i}")
            count = await db.scalar(select(func.count(Snapshot.id)))
        assert count == 3
