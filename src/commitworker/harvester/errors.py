"""
Error taxonomy for the commit harvester.

Errors below repository granularity are logged and absorbed by the
orchestrator; errors raised while listing repositories propagate to the caller.
"""

from typing import Optional


class HarvestError(Exception):
    """Base exception for harvest failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthError(HarvestError):
    """Credential rejected or expired."""


class TransportError(HarvestError):
    """Network, timeout, rate-limit or upstream 5xx failure. Not retried internally."""


class ProtocolError(HarvestError):
    """Response did not have the expected shape."""


class NotFoundError(HarvestError):
    """Requested resource does not exist."""


class BranchNotFoundError(NotFoundError):
    """Repository has no resolvable default branch."""


class DecodeError(HarvestError):
    """Payload body could not be decoded."""


class StorageError(HarvestError):
    """Persistence layer failure."""


class ConfigError(HarvestError):
    """Invalid configuration at startup."""


__all__ = [
    "HarvestError",
    "AuthError",
    "TransportError",
    "ProtocolError",
    "NotFoundError",
    "BranchNotFoundError",
    "DecodeError",
    "StorageError",
    "ConfigError",
]
