"""Entry point: python -m housekeeping

Operator commands for the backup lifecycle and the leaderboard, run
against the configured database without going through the HTTP API.

Usage:
    python -m housekeeping snapshot [--name NAME]   # take a manual snapshot
    python -m housekeeping list                     # list snapshots, newest first
    python -m housekeeping restore ID               # restore a snapshot
    python -m housekeeping prune                    # apply the retention policy now
    python -m housekeeping rebuild-leaderboard      # recreate all leaderboard entries
    python -m housekeeping reset [--game-only]      # wipe runtime data and restart ids
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from docdesk.database import async_session, close_db, init_db
from docdesk.entities.snapshot import SnapshotKind
from docdesk.services.errors import DocdeskError
from docdesk.services.maintenance import reset_runtime_data
from docdesk.services.policy import get_retention_policy
from docdesk.services.ranking import rebuild_leaderboard
from docdesk.services.restore import apply_snapshot
from docdesk.services.retention import enforce_retention
from docdesk.services.snapshots import create_snapshot, list_snapshots


async def cmd_snapshot(args: argparse.Namespace) -> int:
    async with async_session() as db:
        snapshot = await create_snapshot(db, name=args.name, kind=SnapshotKind.MANUAL)
    print(f"Created snapshot {snapshot.id}: {snapshot.name} ({snapshot.size})")
    return 0


async def cmd_list(args: argparse.Namespace) -> int:
    async with async_session() as db:
        rows = await list_snapshots(db)
    if not rows:
        print("No snapshots.")
        return 0
    for snap in rows:
        print(f"  {snap.id:>5}  {snap.created_at:%Y-%m-%d %H:%M}  {snap.kind:<9}  {snap.size:>10}  {snap.name}")
    return 0


async def cmd_restore(args: argparse.Namespace) -> int:
    async with async_session() as db:
        payload = await apply_snapshot(db, args.snapshot_id)
    print(
        f"Restored snapshot {args.snapshot_id}: "
        f"{len(payload.templates)} template(s), {len(payload.proposals)} proposal(s)"
    )
    return 0


async def cmd_prune(args: argparse.Namespace) -> int:
    async with async_session() as db:
        policy = await get_retention_policy(db)
        deleted = await enforce_retention(db, policy.max_snapshots)
    print(f"Keeping at most {policy.max_snapshots}; removed {len(deleted)} snapshot(s)")
    return 0


async def cmd_rebuild(args: argparse.Namespace) -> int:
    async with async_session() as db:
        count = await rebuild_leaderboard(db)
    print(f"Leaderboard rebuilt with {count} entr{'y' if count == 1 else 'ies'}")
    return 0


async def cmd_reset(args: argparse.Namespace) -> int:
    async with async_session() as db:
        removed = await reset_runtime_data(db, game_only=args.game_only)
    for table, count in removed.items():
        print(f"  {table}: removed {count} row(s)")
    return 0


COMMANDS = {
    "snapshot": cmd_snapshot,
    "list": cmd_list,
    "restore": cmd_restore,
    "prune": cmd_prune,
    "rebuild-leaderboard": cmd_rebuild,
    "reset": cmd_reset,
}


async def main(args: argparse.Namespace) -> int:
    await init_db()
    try:
        return await COMMANDS[args.command](args)
    except DocdeskError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await close_db()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m housekeeping",
        description="Snapshot and leaderboard maintenance for docdesk",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    snap = sub.add_parser("snapshot", help="Take a manual snapshot of all documents")
    snap.add_argument("--name", default=None, help="Snapshot name (defaults to a timestamp)")

    sub.add_parser("list", help="List snapshots, newest first")

    restore = sub.add_parser("restore", help="Replace all documents with a snapshot")
    restore.add_argument("snapshot_id", type=int)

    sub.add_parser("prune", help="Delete snapshots beyond the retention limit")
    sub.add_parser("rebuild-leaderboard", help="Recreate the leaderboard from player totals")

    reset = sub.add_parser("reset", help="Delete all runtime rows and restart id sequences")
    reset.add_argument(
        "--game-only",
        action="store_true",
        help="Only clear game tables; keep documents, snapshots and settings",
    )
    return parser


def cli(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(main(args))


if __name__ == "__main__":
    sys.exit(cli())
