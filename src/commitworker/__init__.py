"""
CommitWorker - GitHub commit history harvester.

Harvests the commit history of a user's repositories through the GitHub
GraphQL API, enriches each commit with file change counts from the REST API,
and stores it in MongoDB keyed by commit id.

Usage:
    from commitworker import WorkerConfig, open_runtime

    async with open_runtime(WorkerConfig.from_env()) as runtime:
        summary = await runtime.orchestrator.run("octocat")
"""

__version__ = "0.1.0"

from .config import WorkerConfig, get_config
from .harvester import (
    HarvestOrchestrator,
    HarvestSummary,
    harvest_for_user,
    open_runtime,
)

__all__ = [
    "__version__",
    # Config
    "WorkerConfig",
    "get_config",
    # Harvester
    "HarvestOrchestrator",
    "HarvestSummary",
    "harvest_for_user",
    "open_runtime",
]
