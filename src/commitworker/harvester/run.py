"""
Harvester CLI - Run a one-off commit harvest.

Usage:
    python -m commitworker.harvester.run --user octocat
    python -m commitworker.harvester.run --user octocat --user torvalds
    python -m commitworker.harvester.run  # Uses HARVEST_USERS from .env

Environment Variables:
    GITHUB_TOKEN - Bearer token for the GitHub API
    MONGODB_URI - MongoDB connection string
    FILES_API - Commit detail URL template
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


async def run_harvest(users: List[str]) -> List[dict]:
    """Run harvest for each user.

    Returns:
        JSON-ready summaries, one per user whose repositories could be listed
    """
    from commitworker.config import WorkerConfig
    from commitworker.harvester import open_runtime
    from commitworker.harvester.orchestrator import run_harvest as harvest_users

    config = WorkerConfig.from_env()
    async with open_runtime(config) as runtime:
        summaries = await harvest_users(runtime.orchestrator, users)
    return [s.model_dump(mode="json") for s in summaries]


def main():
    parser = argparse.ArgumentParser(
        description="Harvest GitHub commit history into MongoDB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--user",
        "-u",
        action="append",
        help="GitHub login to harvest (repeatable, default: HARVEST_USERS env var)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args()

    users = args.user
    if not users:
        from commitworker.config import WorkerConfig

        users = WorkerConfig.from_env().harvest_users
    if not users:
        parser.error("No user specified. Use --user or set HARVEST_USERS in .env")

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    try:
        result = asyncio.run(run_harvest(users))
    except KeyboardInterrupt:
        logger.info("Harvest interrupted")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Harvest failed: {e}")
        sys.exit(1)

    print(json.dumps(result, indent=2))
    if len(result) < len(users):
        sys.exit(1)


if __name__ == "__main__":
    main()
