"""Daily backup scheduler.

The scheduler owns a single asyncio task. ``arm`` always cancels that task
before starting a new one, so a policy change never leaves two timers
firing for the same job.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from docdesk.config import settings
from docdesk.schemas.snapshots import RetentionPolicy

logger = logging.getLogger(__name__)


def _utc(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc)


def next_fire_time(now: datetime, hour: int, minute: int) -> datetime:
    """The first ``hour:minute`` strictly after ``now``, in ``now``'s timezone.

    A wall time skipped by a DST jump resolves to the instant it would have
    been under the old offset (02:30 on a spring-forward night is 03:30).
    """
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if _utc(candidate) <= _utc(now):
        candidate += timedelta(days=1)
    return _utc(candidate).astimezone(now.tzinfo)


def delay_between(now: datetime, target: datetime) -> float:
    """Elapsed seconds from ``now`` to ``target``, across any offset change."""
    return (_utc(target) - _utc(now)).total_seconds()


def seconds_until(now: datetime, hour: int, minute: int) -> float:
    return delay_between(now, next_fire_time(now, hour, minute))


def _default_now() -> datetime:
    return datetime.now(ZoneInfo(settings.backup_timezone))


class BackupScheduler:
    """Runs ``job`` once a day at the policy's time of day."""

    def __init__(
        self,
        job: Callable[[], Awaitable[object]],
        *,
        now: Callable[[], datetime] = _default_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._job = job
        self._now = now
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._policy: Optional[RetentionPolicy] = None
        self.next_run_at: Optional[datetime] = None

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def policy(self) -> Optional[RetentionPolicy]:
        return self._policy

    async def arm(self, policy: RetentionPolicy) -> None:
        """Replace any running timer with one for ``policy``."""
        await self.cancel()
        self._policy = policy
        if not policy.enabled:
            logger.info("Automatic backups disabled; scheduler idle")
            return
        self._task = asyncio.create_task(self._run(policy), name="scheduled-backup")
        logger.info("Automatic backup scheduled for %s daily", policy.backup_time)

    async def cancel(self) -> None:
        task, self._task = self._task, None
        self.next_run_at = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self, policy: RetentionPolicy) -> None:
        try:
            while True:
                now = self._now()
                # Never schedule at or before a slot that already fired.
                after = now
                if self.next_run_at is not None and _utc(self.next_run_at) > _utc(now):
                    after = self.next_run_at
                self.next_run_at = next_fire_time(after, policy.hour, policy.minute)
                await self._sleep(delay_between(now, self.next_run_at))
                await self._fire()
        except asyncio.CancelledError:
            logger.debug("Backup scheduler cancelled")
            raise

    async def _fire(self) -> None:
        try:
            await self._job()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled backup failed; next attempt at the next scheduled time")
