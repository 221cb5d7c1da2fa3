"""Temporal activities for CommitWorker.

Activities are the building blocks of workflows - they represent
individual units of work that can be retried and monitored.
"""

from __future__ import annotations

import logging
from typing import Any

from temporalio import activity

from .config import get_config
from .harvester.runtime import open_runtime

logger = logging.getLogger(__name__)


@activity.defn
async def harvest_user_commits(user: str) -> dict[str, Any]:
    """Activity to harvest every repository of one GitHub user.

    Args:
        user: GitHub login

    Returns:
        HarvestSummary as a JSON-ready dict

    Raises:
        HarvestError: repositories could not be listed (Temporal retries it)
    """
    logger.info(f"Harvesting commits for {user}")
    async with open_runtime(get_config()) as runtime:
        summary = await runtime.orchestrator.run(user)
    return summary.model_dump(mode="json")
