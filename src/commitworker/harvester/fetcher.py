"""
Commit Page Fetcher.

Walks cursor-paginated GraphQL connections to list a user's repositories and
the commit history of each repository's default branch.

Cursor discipline:
- the ``cursor`` variable is absent on the first request
- every following request carries the server's ``endCursor`` unmodified
- the loop ends when the server reports ``hasNextPage: false``
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from .errors import BranchNotFoundError, NotFoundError, ProtocolError
from .interfaces import QueryClient
from .models import Commit, PageInfo, Repository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

REPOSITORIES_QUERY = """
query($user: String!, $pageSize: Int!, $cursor: String) {
  user(login: $user) {
    repositories(first: $pageSize, after: $cursor, ownerAffiliations: OWNER) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        name
      }
    }
  }
}
"""

DEFAULT_BRANCH_QUERY = """
query($user: String!, $repo: String!) {
  repository(owner: $user, name: $repo) {
    isEmpty
    defaultBranchRef {
      name
    }
  }
}
"""

HISTORY_QUERY = """
query($user: String!, $repo: String!, $branch: String!, $pageSize: Int!, $cursor: String) {
  repository(owner: $user, name: $repo) {
    ref(qualifiedName: $branch) {
      target {
        ... on Commit {
          history(first: $pageSize, after: $cursor) {
            pageInfo {
              hasNextPage
              endCursor
            }
            nodes {
              oid
              committedDate
              message
              author {
                name
                date
              }
              additions
              deletions
            }
          }
        }
      }
    }
  }
}
"""

# Extracts the connection object (pageInfo + nodes) from a response's data.
ConnectionGetter = Callable[[Dict[str, Any]], Dict[str, Any]]


class CommitPageFetcher:
    """Fetches repositories and commit history through a QueryClient."""

    def __init__(self, query_client: QueryClient, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.query_client = query_client
        self.page_size = page_size

    async def fetch_repositories(self, user: str) -> List[Repository]:
        """List every repository owned by ``user``, across all pages."""

        def connection(data: Dict[str, Any]) -> Dict[str, Any]:
            user_node = data.get("user")
            if user_node is None:
                raise NotFoundError(f"User '{user}' not found")
            return _require_dict(user_node, "repositories", "user")

        nodes = await self._paginate(
            REPOSITORIES_QUERY, {"user": user}, connection, what=f"repositories of {user}"
        )
        repositories = []
        for node in nodes:
            try:
                repositories.append(Repository.model_validate(node))
            except ValidationError as e:
                raise ProtocolError(f"Malformed repository node: {e}") from e

        logger.info(f"Found {len(repositories)} repositories for {user}")
        return repositories

    async def resolve_default_branch(self, user: str, repo: str) -> Optional[str]:
        """Name of the repository's default branch, or None for an empty repository."""
        data = await self.query_client.execute(
            DEFAULT_BRANCH_QUERY, {"user": user, "repo": repo}
        )
        repository = data.get("repository")
        if repository is None:
            raise NotFoundError(f"Repository {user}/{repo} not found")
        if not isinstance(repository, dict):
            raise ProtocolError(f"Malformed repository object for {user}/{repo}")

        branch_ref = repository.get("defaultBranchRef")
        if branch_ref is not None and not isinstance(branch_ref, dict):
            raise ProtocolError(f"Malformed defaultBranchRef for {user}/{repo}")
        if not branch_ref or not branch_ref.get("name"):
            if repository.get("isEmpty"):
                return None
            raise BranchNotFoundError(f"Repository {user}/{repo} has no default branch")
        return branch_ref["name"]

    async def fetch_commit_history(self, user: str, repo: str) -> List[Commit]:
        """All commits reachable from the default branch, file counts zeroed."""
        branch = await self.resolve_default_branch(user, repo)
        if branch is None:
            logger.info(f"Repository {user}/{repo} is empty")
            return []

        qualified = branch if branch.startswith("refs/") else f"refs/heads/{branch}"

        def connection(data: Dict[str, Any]) -> Dict[str, Any]:
            repository = data.get("repository")
            if repository is None:
                raise NotFoundError(f"Repository {user}/{repo} not found")
            if not isinstance(repository, dict):
                raise ProtocolError(f"Malformed repository object for {user}/{repo}")
            if repository.get("ref") is None:
                raise BranchNotFoundError(f"Branch {branch} of {user}/{repo} not found")
            target = _require_dict(_require_dict(repository, "ref", "repository"), "target", "ref")
            return _require_dict(target, "history", "target")

        nodes = await self._paginate(
            HISTORY_QUERY,
            {"user": user, "repo": repo, "branch": qualified},
            connection,
            what=f"history of {user}/{repo}@{branch}",
        )
        commits = [_commit_from_node(node, repo) for node in nodes]
        logger.debug(f"Fetched {len(commits)} commits from {user}/{repo}@{branch}")
        return commits

    async def _paginate(
        self,
        query: str,
        variables: Dict[str, Any],
        connection: ConnectionGetter,
        what: str,
    ) -> List[Dict[str, Any]]:
        nodes: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        seen_cursors = set()
        page = 0

        while True:
            page_vars = dict(variables, pageSize=self.page_size)
            if cursor is not None:
                page_vars["cursor"] = cursor

            data = await self.query_client.execute(query, page_vars)
            conn = connection(data)
            page += 1

            page_nodes = conn.get("nodes")
            if page_nodes is None:
                page_nodes = []
            if not isinstance(page_nodes, list):
                raise ProtocolError(f"Malformed nodes in {what}")
            nodes.extend(n for n in page_nodes if n is not None)

            try:
                info = PageInfo.model_validate(conn.get("pageInfo") or {})
            except ValidationError as e:
                raise ProtocolError(f"Malformed pageInfo in {what}: {e}") from e

            if not info.has_next_page:
                break
            if not info.end_cursor:
                raise ProtocolError(f"Server reported another page of {what} without a cursor")
            if info.end_cursor in seen_cursors:
                raise ProtocolError(f"Server repeated cursor while paging {what}")
            seen_cursors.add(info.end_cursor)
            cursor = info.end_cursor

        logger.debug(f"Paged {what}: {len(nodes)} nodes in {page} page(s)")
        return nodes


def _require_dict(parent: Any, key: str, parent_name: str) -> Dict[str, Any]:
    if not isinstance(parent, dict):
        raise ProtocolError(f"Expected object for {parent_name}")
    value = parent.get(key)
    if not isinstance(value, dict):
        raise ProtocolError(f"Missing '{key}' in {parent_name}")
    return value


def _commit_from_node(node: Any, repo: str) -> Commit:
    if not isinstance(node, dict):
        raise ProtocolError(f"Malformed commit node in {repo}")
    author = node.get("author") or {}
    if not isinstance(author, dict):
        raise ProtocolError(f"Malformed author in commit node of {repo}")
    try:
        return Commit(
            commit_id=node["oid"],
            message=node.get("message") or "",
            committed_by=author.get("name") or "",
            # GitActor.date is nullable; committedDate never is
            committed_at=author.get("date") or node.get("committedDate"),
            lines_added=node.get("additions") or 0,
            lines_deleted=node.get("deletions") or 0,
            repo_name=repo,
        )
    except (KeyError, ValidationError) as e:
        raise ProtocolError(f"Malformed commit node in {repo}: {e}") from e


__all__ = ["CommitPageFetcher", "DEFAULT_PAGE_SIZE"]
