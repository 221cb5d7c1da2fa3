"""
GraphQL query client over httpx.

One POST per query with ``{"query", "variables"}`` and a bearer credential.
HTTP and GraphQL failures are translated into the harvester error taxonomy;
nothing is retried here.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from .errors import AuthError, HarvestError, NotFoundError, ProtocolError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"


def bearer_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def error_for_status(response: httpx.Response, what: str) -> HarvestError:
    """Map a non-200 response to an exception (returned, not raised)."""
    status = response.status_code
    detail = f"{what} failed: HTTP {status}"
    if status == 401:
        return AuthError(detail, status_code=status)
    if status == 429 or (
        status == 403 and response.headers.get("x-ratelimit-remaining") == "0"
    ):
        return TransportError(f"{detail} (rate limited)", status_code=status)
    if status == 403:
        return AuthError(detail, status_code=status)
    if status == 404:
        return NotFoundError(detail, status_code=status)
    if status >= 500:
        return TransportError(detail, status_code=status)
    return ProtocolError(detail, status_code=status)


class GraphQLQueryClient:
    """QueryClient backed by a shared ``httpx.AsyncClient``.

    The token is read-only state and the client is safe to share between
    concurrent fetches.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token: str,
        endpoint: str = DEFAULT_GRAPHQL_URL,
    ):
        self._http = http
        self._token = token
        self.endpoint = endpoint

    async def execute(
        self, query: str, variables: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = dict(variables)

        try:
            response = await self._http.post(
                self.endpoint, json=payload, headers=bearer_headers(self._token)
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"GraphQL request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"GraphQL request failed: {e}") from e

        if response.status_code != 200:
            raise error_for_status(response, "GraphQL request")

        try:
            body = response.json()
        except ValueError as e:
            raise ProtocolError(f"GraphQL response is not JSON: {e}") from e

        if not isinstance(body, dict):
            raise ProtocolError("GraphQL response is not an object")

        errors = body.get("errors")
        if errors:
            raise self._error_from_graphql(errors)

        data = body.get("data")
        if not isinstance(data, dict):
            raise ProtocolError("GraphQL response has no data")
        return data

    @staticmethod
    def _error_from_graphql(errors: Any) -> HarvestError:
        if not isinstance(errors, list):
            return ProtocolError(f"GraphQL errors: {errors}")

        messages = []
        types = set()
        for err in errors:
            if isinstance(err, dict):
                messages.append(str(err.get("message", err)))
                if err.get("type"):
                    types.add(err["type"])
            else:
                messages.append(str(err))
        text = "; ".join(messages)

        if "RATE_LIMITED" in types:
            return TransportError(f"GraphQL rate limited: {text}")
        if "NOT_FOUND" in types:
            return NotFoundError(text)
        if types & {"FORBIDDEN", "UNAUTHORIZED"}:
            return AuthError(text)
        return ProtocolError(f"GraphQL errors: {text}")


__all__ = ["GraphQLQueryClient", "DEFAULT_GRAPHQL_URL", "bearer_headers", "error_for_status"]
