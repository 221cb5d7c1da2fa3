"""
Temporal worker for the commit harvest task queue.
"""

from __future__ import annotations

import logging
from typing import Optional

from temporalio.client import Client
from temporalio.worker import Worker

from ..activities import harvest_user_commits
from ..workflows import HARVEST_TASK_QUEUE, CommitHarvestWorkflow

logger = logging.getLogger(__name__)


async def get_temporal_client(host: Optional[str] = None) -> Client:
    """Connect to Temporal (host from config if not provided)."""
    if host is None:
        from ..config import get_config

        host = get_config().temporal_host
    return await Client.connect(host)


def create_harvest_worker(client: Client, task_queue: str = HARVEST_TASK_QUEUE) -> Worker:
    """Worker serving CommitHarvestWorkflow and its harvest activity."""
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[CommitHarvestWorkflow],
        activities=[harvest_user_commits],
    )


async def run_worker(temporal_host: Optional[str] = None) -> None:
    """Run the harvest worker until cancelled."""
    client = await get_temporal_client(temporal_host)
    worker = create_harvest_worker(client)
    logger.info(f"Starting harvest worker on queue {HARVEST_TASK_QUEUE}")
    await worker.run()
