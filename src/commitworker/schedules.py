"""
Temporal schedule for the daily commit harvest.

Usage:
    commitworker-schedules create --user octocat --user torvalds
    commitworker-schedules list
    commitworker-schedules pause commit-harvest-daily

Without ``--user``, ``create`` schedules the logins in HARVEST_USERS.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from temporalio.client import (
    Client,
    Schedule,
    ScheduleActionStartWorkflow,
    ScheduleAlreadyRunningError,
    ScheduleSpec,
)

from .config import get_config
from .core.worker import get_temporal_client
from .workflows import HARVEST_TASK_QUEUE, CommitHarvestWorkflow

logger = logging.getLogger(__name__)

HARVEST_SCHEDULE_ID = "commit-harvest-daily"
HARVEST_CRON = "0 6 * * *"


def harvest_schedule(
    users: Sequence[str],
    cron: str = HARVEST_CRON,
    task_queue: str = HARVEST_TASK_QUEUE,
) -> Schedule:
    """Schedule starting CommitHarvestWorkflow over ``users`` on ``cron``."""
    return Schedule(
        action=ScheduleActionStartWorkflow(
            CommitHarvestWorkflow.run,
            args=[list(users)],
            id=f"{HARVEST_SCHEDULE_ID}-run",
            task_queue=task_queue,
        ),
        spec=ScheduleSpec(cron_expressions=[cron]),
    )


async def ensure_harvest_schedule(
    client: Client,
    users: Sequence[str],
    schedule_id: str = HARVEST_SCHEDULE_ID,
    cron: str = HARVEST_CRON,
) -> Optional[str]:
    """Create the harvest schedule unless it already exists.

    Returns:
        The schedule ID, or None when there is nobody to harvest
    """
    if not users:
        logger.error("No users to schedule. Set HARVEST_USERS or pass --user")
        return None

    try:
        await client.create_schedule(schedule_id, harvest_schedule(users, cron))
        logger.info(f"Created schedule {schedule_id} for {len(users)} user(s)")
    except ScheduleAlreadyRunningError:
        logger.warning(f"Schedule {schedule_id} already exists")
    return schedule_id


async def list_schedules(client: Client) -> List[dict]:
    schedules = []
    async for entry in await client.list_schedules():
        action = entry.schedule.action if entry.schedule else None
        schedules.append({"id": entry.id, "workflow": getattr(action, "workflow", None)})
    return schedules


async def change_schedule(client: Client, schedule_id: str, op: str) -> bool:
    """Apply ``op`` (delete, pause or unpause) to a schedule. False on failure."""
    handle = client.get_schedule_handle(schedule_id)
    try:
        await getattr(handle, op)()
    except Exception as e:
        logger.error(f"Could not {op} schedule {schedule_id}: {e}")
        return False
    logger.info(f"Schedule {schedule_id}: {op} done")
    return True


async def _cli_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Manage the Temporal harvest schedule")
    parser.add_argument("--temporal-host", default=None, help="Temporal server address")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create the daily harvest schedule")
    create.add_argument("--user", action="append", help="GitHub login (repeatable)")
    commands.add_parser("list", help="List schedules")
    for op in ("delete", "pause", "unpause"):
        commands.add_parser(op, help=f"{op.capitalize()} a schedule").add_argument(
            "schedule_id", nargs="?", default=HARVEST_SCHEDULE_ID
        )

    args = parser.parse_args(argv)
    client = await get_temporal_client(args.temporal_host)

    if args.command == "create":
        users = args.user or get_config().harvest_users
        return 0 if await ensure_harvest_schedule(client, users) else 1
    if args.command == "list":
        for s in await list_schedules(client):
            print(f"  {s['id']}: {s['workflow']}")
        return 0
    return 0 if await change_schedule(client, args.schedule_id, args.command) else 1


def main():
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    raise SystemExit(asyncio.run(_cli_main()))


if __name__ == "__main__":
    main()
