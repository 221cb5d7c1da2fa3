"""Temporal workflows for CommitWorker.

Workflows orchestrate activities and provide durability, retries,
and state management for long-running business processes.
"""

from __future__ import annotations

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    from .activities import harvest_user_commits

HARVEST_TASK_QUEUE = "commit-harvest-tasks"


@workflow.defn
class CommitHarvestWorkflow:
    """Workflow harvesting commit history for a list of users.

    Each user runs as its own activity; a user whose harvest fails is
    recorded and the next user is still processed.
    """

    @workflow.run
    async def run(self, users: list[str]) -> list[dict]:
        """Execute the harvest for every user.

        Args:
            users: GitHub logins to harvest

        Returns:
            One entry per user: the harvest summary, or ``{"user", "error"}``
        """
        results = []
        for user in users:
            try:
                summary = await workflow.execute_activity(
                    harvest_user_commits,
                    user,
                    start_to_close_timeout=timedelta(minutes=30),
                    retry_policy=RetryPolicy(maximum_attempts=3),
                )
                results.append(summary)
            except ActivityError as e:
                workflow.logger.error(f"Harvest failed for {user}: {e}")
                results.append({"user": user, "error": str(e.cause or e)})
        return results
