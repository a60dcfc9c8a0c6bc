"""docdesk: proposal/template desk with snapshot backups and a game leaderboard."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docdesk.config import settings, cors_origins
from docdesk.database import async_session, close_db, init_db
from docdesk.entities.snapshot import SnapshotKind
from docdesk.routes import documents, game, snapshots
from docdesk.routes import settings as settings_routes
from docdesk.seed import seed_data
from docdesk.services.policy import get_retention_policy
from docdesk.services.scheduler import BackupScheduler
from docdesk.services.snapshots import create_snapshot

logger = logging.getLogger(__name__)


async def run_scheduled_snapshot() -> None:
    async with async_session() as db:
        snapshot = await create_snapshot(db, kind=SnapshotKind.SCHEDULED)
    logger.info("Automatic backup %d created", snapshot.id)


scheduler = BackupScheduler(run_scheduled_snapshot)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    async with async_session() as db:
        await seed_data(db)
        policy = await get_retention_policy(db)
    await scheduler.arm(policy)
    yield
    await scheduler.cancel()
    await close_db()


app = FastAPI(
    title="docdesk",
    description="Business proposals and templates with snapshot backups, plus a trivia leaderboard",
    version=settings.api_version,
    lifespan=lifespan,
)
app.state.scheduler = scheduler

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(snapshots.router, prefix=settings.api_prefix)
app.include_router(settings_routes.router, prefix=settings.api_prefix)
app.include_router(game.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "service": "docdesk",
        "version": settings.api_version,
        "backup_scheduled": scheduler.armed,
    }
