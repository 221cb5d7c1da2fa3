"""
Boundary Adapter: translates an inbound "harvest this user" request into a
harvest run and serializes the outcome with an HTTP-style status code.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import HarvestError
from .orchestrator import HarvestOrchestrator

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Commits fetched and stored in MongoDB successfully."


@dataclass
class HarvestOutcome:
    """Status code plus JSON body for the caller."""

    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code < 400


async def harvest_for_user(
    orchestrator: HarvestOrchestrator, user: Optional[str]
) -> HarvestOutcome:
    """HarvestForUser: 400 for a missing user, 500 when listing fails, else 200."""
    user = (user or "").strip()
    if not user:
        return HarvestOutcome(400, {"error": "Missing user parameter"})

    try:
        summary = await orchestrator.run(user)
    except HarvestError as e:
        logger.error(f"could not fetch repositories for {user}: {e}")
        return HarvestOutcome(500, {"error": f"could not fetch repositories: {e}"})

    failed = len(summary.failed_repositories)
    if failed:
        message = (
            f"Commits fetched and stored with {failed} of "
            f"{len(summary.repositories)} repositories failing."
        )
    else:
        message = SUCCESS_MESSAGE

    return HarvestOutcome(
        200,
        {"message": message, "summary": summary.model_dump(mode="json")},
    )


__all__ = ["HarvestOutcome", "harvest_for_user", "SUCCESS_MESSAGE"]
