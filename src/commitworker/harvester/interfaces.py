"""
Capability interfaces injected into the harvester.

Concrete implementations live in graphql.py, enrichment.py and persistence.py;
tests pass in-memory fakes with the same shape.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

from .models import FileChangeCounts


@runtime_checkable
class QueryClient(Protocol):
    """Runs a GraphQL query and returns its ``data`` object."""

    async def execute(
        self, query: str, variables: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]: ...


@runtime_checkable
class EnrichmentClient(Protocol):
    """Classifies the files touched by one commit."""

    async def classify_files(
        self, user: str, repo: str, commit_id: str
    ) -> FileChangeCounts: ...


@runtime_checkable
class StoreHandle(Protocol):
    """Document store supporting insert-if-absent writes."""

    async def insert_if_absent(
        self, key_field: str, key: str, document: Mapping[str, Any]
    ) -> bool: ...

    async def ping(self) -> None: ...


__all__ = ["QueryClient", "EnrichmentClient", "StoreHandle"]
