"""
Shared fakes for the harvester protocols.
"""

from typing import Any, Dict, List, Mapping, Optional

import pytest

from commitworker.harvester.errors import StorageError
from commitworker.harvester.models import FileChangeCounts


class ScriptedQueryClient:
    """QueryClient returning canned ``data`` objects in order and recording calls."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    async def execute(self, query: str, variables: Optional[Mapping[str, Any]] = None):
        self.calls.append({"query": query, "variables": dict(variables or {})})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeEnricher:
    """EnrichmentClient with per-commit results or errors."""

    def __init__(self, results: Optional[Dict[str, Any]] = None, default=None):
        self.results = results or {}
        self.default = default if default is not None else FileChangeCounts(added=1)
        self.calls: List[tuple] = []

    async def classify_files(self, user: str, repo: str, commit_id: str) -> FileChangeCounts:
        self.calls.append((user, repo, commit_id))
        result = self.results.get(commit_id, self.default)
        if isinstance(result, Exception):
            raise result
        return result


class InMemoryStore:
    """StoreHandle keeping documents in a dict, with optional failing keys."""

    def __init__(self, fail_on: Optional[set] = None):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.fail_on = fail_on or set()
        self.writes = 0

    async def insert_if_absent(self, key_field: str, key: str, document: Mapping[str, Any]) -> bool:
        self.writes += 1
        if key in self.fail_on:
            raise StorageError(f"write rejected for {key}")
        if key in self.documents:
            return False
        self.documents[key] = dict(document)
        return True

    async def ping(self) -> None:
        return None


def repo_page(names, has_next=False, cursor=None) -> Dict[str, Any]:
    return {
        "user": {
            "repositories": {
                "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
                "nodes": [{"name": n} for n in names],
            }
        }
    }


def branch_data(name: Optional[str] = "main", is_empty: bool = False) -> Dict[str, Any]:
    ref = {"name": name} if name else None
    return {"repository": {"isEmpty": is_empty, "defaultBranchRef": ref}}


def commit_node(oid: str, additions: int = 3, deletions: int = 1) -> Dict[str, Any]:
    return {
        "oid": oid,
        "message": f"commit {oid}",
        "author": {"name": "Octo Cat", "date": "2024-05-01T12:00:00Z"},
        "additions": additions,
        "deletions": deletions,
    }


def history_page(oids, has_next=False, cursor=None) -> Dict[str, Any]:
    return {
        "repository": {
            "ref": {
                "target": {
                    "history": {
                        "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
                        "nodes": [commit_node(o) for o in oids],
                    }
                }
            }
        }
    }


@pytest.fixture
def store():
    return InMemoryStore()
