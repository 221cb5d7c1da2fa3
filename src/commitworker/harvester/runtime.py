"""
Harvest runtime wiring.

Builds the store connection and the shared HTTP client once, checks the store
is reachable, and hands both down to the orchestrator. Nothing here is stored
in module-level state.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from ..config import WorkerConfig, get_config
from .enrichment import RestEnrichmentClient
from .errors import ConfigError
from .fetcher import CommitPageFetcher
from .graphql import GraphQLQueryClient
from .interfaces import EnrichmentClient, QueryClient, StoreHandle
from .orchestrator import HarvestOrchestrator
from .persistence import CommitWriter, MongoCommitStore

logger = logging.getLogger(__name__)


@dataclass
class HarvestRuntime:
    """Everything a harvest invocation needs, built once per process."""

    orchestrator: HarvestOrchestrator
    store: StoreHandle


def build_orchestrator(
    config: WorkerConfig,
    query_client: QueryClient,
    enricher: EnrichmentClient,
    store: StoreHandle,
) -> HarvestOrchestrator:
    tuning = config.harvest
    return HarvestOrchestrator(
        fetcher=CommitPageFetcher(query_client, page_size=tuning.page_size),
        enricher=enricher,
        writer=CommitWriter(store),
        repo_concurrency=tuning.repo_concurrency,
        enrichment_concurrency=tuning.enrichment_concurrency,
    )


@asynccontextmanager
async def open_runtime(config: Optional[WorkerConfig] = None) -> AsyncIterator[HarvestRuntime]:
    """Connect to MongoDB and GitHub; close both on exit.

    Raises:
        ConfigError: no GitHub token configured.
        StorageError: MongoDB did not answer the ping in time.
    """
    config = config or get_config()
    if not config.github_token:
        raise ConfigError("GITHUB_TOKEN is not configured")

    tuning = config.harvest
    store = MongoCommitStore.connect(
        config.mongodb_uri,
        database=config.mongodb_database,
        collection=config.mongodb_collection,
        timeout=tuning.store_timeout,
    )
    try:
        await store.ping()
        await store.ensure_indexes()
        logger.info("Connected to MongoDB successfully")

        async with httpx.AsyncClient(timeout=tuning.request_timeout) as http:
            orchestrator = build_orchestrator(
                config,
                GraphQLQueryClient(http, config.github_token, endpoint=config.graphql_url),
                RestEnrichmentClient(
                    http, config.github_token, url_template=config.enrichment_url_template
                ),
                store,
            )
            yield HarvestRuntime(orchestrator=orchestrator, store=store)
    finally:
        await store.close()


__all__ = ["HarvestRuntime", "build_orchestrator", "open_runtime"]
