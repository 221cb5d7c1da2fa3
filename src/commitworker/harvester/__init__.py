"""
Harvester module for commit history import.

Components:
- fetcher: cursor-paginated repository and commit history queries (GraphQL)
- enrichment: per-commit file change classification (REST)
- orchestrator: List -> Fetch -> Enrich -> Persist flow with failure isolation
- persistence: insert-if-absent writer over MongoDB
- boundary: HarvestForUser request/outcome translation
- runtime: wiring from WorkerConfig to a ready orchestrator
"""

from .boundary import HarvestOutcome, harvest_for_user
from .enrichment import RestEnrichmentClient, classify_statuses
from .errors import (
    AuthError,
    BranchNotFoundError,
    DecodeError,
    HarvestError,
    NotFoundError,
    ProtocolError,
    StorageError,
    TransportError,
)
from .fetcher import CommitPageFetcher
from .graphql import GraphQLQueryClient
from .models import Commit, FileChangeCounts, HarvestSummary, Repository
from .orchestrator import HarvestOrchestrator, run_harvest
from .persistence import CommitWriter, MongoCommitStore
from .runtime import HarvestRuntime, open_runtime

__all__ = [
    "CommitPageFetcher",
    "GraphQLQueryClient",
    "RestEnrichmentClient",
    "classify_statuses",
    "HarvestOrchestrator",
    "run_harvest",
    "CommitWriter",
    "MongoCommitStore",
    "HarvestOutcome",
    "harvest_for_user",
    "HarvestRuntime",
    "open_runtime",
    "Commit",
    "FileChangeCounts",
    "HarvestSummary",
    "Repository",
    "HarvestError",
    "AuthError",
    "TransportError",
    "ProtocolError",
    "NotFoundError",
    "BranchNotFoundError",
    "DecodeError",
    "StorageError",
]
