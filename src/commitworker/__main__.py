"""CommitWorker unified entry point.

Start the HTTP service (default):
    python -m commitworker

Start Temporal worker:
    python -m commitworker --temporal

Harvest once and exit:
    python -m commitworker --user octocat
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main():
    """CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(description="CommitWorker: GitHub commit harvester")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--temporal",
        action="store_true",
        help="Start Temporal worker instead of the HTTP service",
    )
    mode.add_argument(
        "--user",
        "-u",
        action="append",
        help="Harvest these GitHub logins once and exit (repeatable)",
    )
    parser.add_argument(
        "--temporal-host",
        default=None,
        help="Temporal server address (default: TEMPORAL_HOST env or localhost:7233)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL env or INFO)",
    )

    args = parser.parse_args()

    from .config import get_config

    config = get_config()
    setup_logging(args.log_level or config.log_level)
    logger = logging.getLogger(__name__)

    if args.temporal:
        # --- Temporal worker mode ---
        from .core.worker import run_worker

        try:
            asyncio.run(run_worker(temporal_host=args.temporal_host))
        except KeyboardInterrupt:
            logger.info("Shutting down...")
            sys.exit(0)
    elif args.user:
        # --- One-shot harvest ---
        from .harvester.run import run_harvest

        try:
            result = asyncio.run(run_harvest(args.user))
        except KeyboardInterrupt:
            logger.info("Harvest interrupted")
            sys.exit(1)
        except Exception as e:
            logger.exception(f"Harvest failed: {e}")
            sys.exit(1)
        print(json.dumps(result, indent=2))
        sys.exit(0 if len(result) == len(args.user) else 1)
    else:
        # --- HTTP service mode (default) ---
        from .server import serve

        serve(config)


if __name__ == "__main__":
    main()
