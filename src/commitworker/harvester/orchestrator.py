"""
Harvest Orchestrator for commit history.

Drives the List repositories -> Fetch commits -> Enrich -> Persist flow for one
user.

Failure isolation:
- listing repositories fails the whole invocation
- a rejected credential (AuthError) anywhere fails the whole invocation
- a failing repository is logged, recorded and skipped
- a failing enrichment lookup degrades that commit's file counts to zero
"""

import asyncio
import logging
from typing import Awaitable, List

from .errors import AuthError
from .interfaces import EnrichmentClient
from .fetcher import CommitPageFetcher
from .models import Commit, FileChangeCounts, HarvestSummary, RepoHarvestResult, Repository
from .persistence import CommitWriter

logger = logging.getLogger(__name__)


class HarvestOrchestrator:
    """
    Harvests every repository of a user into the commit store.

    Repositories and enrichment lookups run concurrently, each bounded by its
    own semaphore so repository tasks never wait on a slot they already hold.
    """

    def __init__(
        self,
        fetcher: CommitPageFetcher,
        enricher: EnrichmentClient,
        writer: CommitWriter,
        repo_concurrency: int = 4,
        enrichment_concurrency: int = 8,
    ):
        self.fetcher = fetcher
        self.enricher = enricher
        self.writer = writer
        self.repo_concurrency = max(1, repo_concurrency)
        self.enrichment_concurrency = max(1, enrichment_concurrency)

    async def run(self, user: str) -> HarvestSummary:
        """Run a harvest for ``user``.

        Returns:
            HarvestSummary with one RepoHarvestResult per repository.

        Raises:
            HarvestError: listing repositories failed.
            AuthError: the credential was rejected mid-harvest; in-flight
                repositories are cancelled.
            asyncio.CancelledError: the invocation was cancelled.
        """
        summary = HarvestSummary(user=user)
        logger.info(f"Starting harvest for {user}")

        try:
            repositories = await self.fetcher.fetch_repositories(user)
            summary.repositories = [RepoHarvestResult(name=r.name) for r in repositories]

            repo_slots = asyncio.Semaphore(self.repo_concurrency)
            enrich_slots = asyncio.Semaphore(self.enrichment_concurrency)
            await _gather_or_cancel(
                [
                    self._harvest_repository(user, repo, result, repo_slots, enrich_slots)
                    for repo, result in zip(repositories, summary.repositories)
                ]
            )
        except AuthError as e:
            summary.finish("failed")
            logger.error(
                f"Harvest for {user} aborted after "
                f"{summary.commits_inserted} inserted commit(s): {e}"
            )
            raise
        except asyncio.CancelledError:
            summary.finish("cancelled")
            logger.warning(
                f"Harvest for {user} cancelled after "
                f"{summary.commits_inserted} inserted commit(s)"
            )
            raise

        summary.finish()
        logger.info(
            f"Harvest complete for {user}: status={summary.status} "
            f"repositories={len(summary.repositories)} "
            f"failed={len(summary.failed_repositories)} "
            f"fetched={summary.commits_fetched} inserted={summary.commits_inserted}"
        )
        return summary

    async def _harvest_repository(
        self,
        user: str,
        repo: Repository,
        result: RepoHarvestResult,
        repo_slots: asyncio.Semaphore,
        enrich_slots: asyncio.Semaphore,
    ) -> None:
        async with repo_slots:
            try:
                commits = await self.fetcher.fetch_commit_history(user, repo.name)
                result.commits_fetched = len(commits)

                outcomes = await _gather_or_cancel(
                    [self._enrich(user, repo.name, c, enrich_slots) for c in commits]
                )
                result.enrichment_failures = outcomes.count(False)

                saved = await self.writer.save(commits)
                result.commits_inserted = saved.inserted
                result.commits_skipped = saved.skipped
                result.status = "ok"
            except AuthError as e:
                result.status = "failed"
                result.error = str(e)
                raise
            except Exception as e:
                result.status = "failed"
                result.error = str(e)
                logger.error(f"could not harvest repo {user}/{repo.name}: {e}")

    async def _enrich(
        self,
        user: str,
        repo: str,
        commit: Commit,
        enrich_slots: asyncio.Semaphore,
    ) -> bool:
        """Fill file counts on ``commit``. Returns False when enrichment failed."""
        async with enrich_slots:
            try:
                counts = await self.enricher.classify_files(user, repo, commit.commit_id)
            except AuthError:
                raise
            except Exception as e:
                logger.warning(
                    f"failed to fetch file changes for commit {commit.commit_id} "
                    f"in {user}/{repo}: {e}"
                )
                commit.apply_file_changes(FileChangeCounts.zero())
                return False

        commit.apply_file_changes(counts)
        return True


async def _gather_or_cancel(aws: List[Awaitable]) -> list:
    """Await all of ``aws`` concurrently. The first exception cancels the rest."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def run_harvest(orchestrator: HarvestOrchestrator, users: List[str]) -> List[HarvestSummary]:
    """Harvest several users one after another.

    A user whose repository listing fails is logged and skipped.
    """
    summaries = []
    for user in users:
        try:
            summaries.append(await orchestrator.run(user))
        except Exception:
            logger.exception(f"Harvest failed for {user}")
    return summaries


__all__ = ["HarvestOrchestrator", "run_harvest"]
