"""
CommitWorker Core - Temporal worker infrastructure.
"""

from .worker import create_harvest_worker, get_temporal_client, run_worker

__all__ = [
    "create_harvest_worker",
    "get_temporal_client",
    "run_worker",
]
