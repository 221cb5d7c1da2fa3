"""
Harvester data models.

Repository and Commit records are transient: built per harvest run, handed to
the writer and discarded. Storage owns the durable copy.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Repository(BaseModel):
    """A repository owned by the harvested user."""

    name: str


class Commit(BaseModel):
    """One commit on a repository's default branch."""

    commit_id: str
    message: str = ""
    committed_by: str = ""
    committed_at: datetime
    lines_added: int = Field(default=0, ge=0)
    lines_deleted: int = Field(default=0, ge=0)
    repo_name: str
    files_added: int = Field(default=0, ge=0)
    files_deleted: int = Field(default=0, ge=0)
    files_updated: int = Field(default=0, ge=0)

    def apply_file_changes(self, counts: "FileChangeCounts") -> None:
        self.files_added = counts.added
        self.files_deleted = counts.deleted
        self.files_updated = counts.updated

    def to_document(self) -> Dict[str, Any]:
        """MongoDB document for this commit."""
        return self.model_dump()


class FileChangeCounts(BaseModel):
    """Per-commit file tally produced by enrichment."""

    model_config = ConfigDict(frozen=True)

    added: int = 0
    deleted: int = 0
    updated: int = 0

    @classmethod
    def zero(cls) -> "FileChangeCounts":
        return cls()


class PageInfo(BaseModel):
    """Cursor state of one connection page. The cursor is opaque."""

    model_config = ConfigDict(populate_by_name=True)

    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: Optional[str] = Field(default=None, alias="endCursor")


class SaveResult(BaseModel):
    inserted: int = 0
    skipped: int = 0


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RepoHarvestResult(BaseModel):
    """Outcome of harvesting a single repository."""

    name: str
    status: Literal["pending", "ok", "failed"] = "pending"
    commits_fetched: int = 0
    commits_inserted: int = 0
    commits_skipped: int = 0
    enrichment_failures: int = 0
    error: Optional[str] = None


class HarvestSummary(BaseModel):
    """Outcome of one harvest invocation for a user."""

    user: str
    status: Literal["running", "completed", "partial", "failed", "cancelled"] = "running"
    started_at: datetime = Field(default_factory=_now)
    finished_at: Optional[datetime] = None
    repositories: List[RepoHarvestResult] = Field(default_factory=list)

    @property
    def failed_repositories(self) -> List[RepoHarvestResult]:
        return [r for r in self.repositories if r.status == "failed"]

    @property
    def commits_fetched(self) -> int:
        return sum(r.commits_fetched for r in self.repositories)

    @property
    def commits_inserted(self) -> int:
        return sum(r.commits_inserted for r in self.repositories)

    def finish(self, status: Optional[str] = None) -> "HarvestSummary":
        if status is None:
            status = "partial" if self.failed_repositories else "completed"
        self.status = status
        self.finished_at = _now()
        return self


__all__ = [
    "Repository",
    "Commit",
    "FileChangeCounts",
    "PageInfo",
    "SaveResult",
    "RepoHarvestResult",
    "HarvestSummary",
]
