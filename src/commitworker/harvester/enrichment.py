"""
Enrichment Client: per-commit file change classification.

One GET per commit against the REST commit detail endpoint. Failures here are
raised to the orchestrator, which degrades the commit's file counts to zero
(a rejected credential aborts the harvest instead).
"""

import logging
from typing import Any, Iterable

import httpx

from ..config import DEFAULT_ENRICHMENT_URL_TEMPLATE
from .errors import AuthError, DecodeError, NotFoundError, TransportError
from .graphql import bearer_headers
from .models import FileChangeCounts

logger = logging.getLogger(__name__)

# REST status tag -> FileChangeCounts field. Unlisted tags are ignored.
STATUS_FIELDS = {
    "added": "added",
    "removed": "deleted",
    "modified": "updated",
}


def classify_statuses(statuses: Iterable[str]) -> FileChangeCounts:
    """Tally file status tags into added/deleted/updated counts."""
    counts = {"added": 0, "deleted": 0, "updated": 0}
    for status in statuses:
        field = STATUS_FIELDS.get(status)
        if field:
            counts[field] += 1
    return FileChangeCounts(**counts)


class RestEnrichmentClient:
    """EnrichmentClient for the GitHub REST commit endpoint (or a compatible one)."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str,
        url_template: str = DEFAULT_ENRICHMENT_URL_TEMPLATE,
    ):
        self._http = http
        self._token = token
        self.url_template = url_template

    def commit_url(self, user: str, repo: str, commit_id: str) -> str:
        return self.url_template.format(user=user, repo=repo, commit_id=commit_id)

    async def classify_files(self, user: str, repo: str, commit_id: str) -> FileChangeCounts:
        url = self.commit_url(user, repo, commit_id)
        headers = dict(bearer_headers(self._token), Accept="application/vnd.github+json")

        try:
            response = await self._http.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Commit detail request for {commit_id} failed: {e}") from e

        if response.status_code == 401:
            raise AuthError(
                f"Commit detail request for {commit_id} was rejected: bad credentials",
                status_code=401,
            )
        if response.status_code == 404:
            raise NotFoundError(f"Commit {commit_id} not found in {user}/{repo}", status_code=404)
        if response.status_code != 200:
            raise TransportError(
                f"Failed to fetch commit details for {commit_id}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(f"Commit detail for {commit_id} is not JSON: {e}") from e

        return classify_statuses(_file_statuses(body, commit_id))


def _file_statuses(body: Any, commit_id: str) -> list:
    if not isinstance(body, dict):
        raise DecodeError(f"Commit detail for {commit_id} is not an object")
    files = body.get("files", [])
    if files is None:
        return []
    if not isinstance(files, list):
        raise DecodeError(f"Commit detail for {commit_id} has a malformed file list")

    statuses = []
    for entry in files:
        if not isinstance(entry, dict):
            raise DecodeError(f"Commit detail for {commit_id} has a malformed file entry")
        status = entry.get("status")
        if isinstance(status, str):
            statuses.append(status)
    return statuses


__all__ = [
    "RestEnrichmentClient",
    "classify_statuses",
    "DEFAULT_ENRICHMENT_URL_TEMPLATE",
    "STATUS_FIELDS",
]
