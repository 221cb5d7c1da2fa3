"""
Configuration for CommitWorker.

Uses Pydantic for validation and environment loading.
"""

import os
from functools import lru_cache
from typing import Annotated, Any, List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_ENRICHMENT_URL_TEMPLATE = (
    "https://api.github.com/repos/{user}/{repo}/commits/{commit_id}"
)


class HarvestTuning(BaseModel):
    """Paging, timeout and concurrency knobs for a harvest run."""

    page_size: int = Field(default=100, ge=1, le=100, description="Nodes per GraphQL page")
    request_timeout: float = Field(
        default=30.0, gt=0, description="HTTP request timeout in seconds"
    )
    store_timeout: float = Field(
        default=10.0, gt=0, description="MongoDB connectivity check deadline in seconds"
    )
    repo_concurrency: int = Field(default=4, ge=1, description="Repositories in flight")
    enrichment_concurrency: int = Field(
        default=8, ge=1, description="Commit detail lookups in flight"
    )


class WorkerConfig(BaseSettings):
    """Master configuration for CommitWorker.

    Loads from environment variables (and .env) using the field names.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO")

    # GitHub
    github_token: str = Field(default="", description="Bearer token for the GitHub API")
    graphql_url: str = Field(default="https://api.github.com/graphql")
    enrichment_url_template: str = Field(
        default=DEFAULT_ENRICHMENT_URL_TEMPLATE,
        description="Commit detail URL with {user}, {repo} and {commit_id} placeholders",
    )

    # MongoDB
    mongodb_uri: str = Field(default="mongodb://localhost:27017")
    mongodb_database: str = Field(default="dashboard")
    mongodb_collection: str = Field(default="git_metrics")

    # HTTP boundary
    http_host: str = Field(default="0.0.0.0")
    http_port: int = Field(default=8080)

    # Temporal (scheduled harvests)
    temporal_host: str = Field(default="localhost:7233")
    harvest_users: Annotated[List[str], NoDecode] = Field(
        default_factory=list, description="Users harvested by the daily schedule"
    )

    harvest: HarvestTuning = Field(default_factory=HarvestTuning)

    @field_validator("harvest_users", mode="before")
    @classmethod
    def _split_users(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [u.strip() for u in value.split(",") if u.strip()]
        return value

    @field_validator("enrichment_url_template")
    @classmethod
    def _check_template(cls, value: str) -> str:
        missing = [p for p in ("{user}", "{repo}", "{commit_id}") if p not in value]
        if missing:
            raise ValueError(f"enrichment_url_template is missing {', '.join(missing)}")
        return value

    @classmethod
    def from_env(cls) -> "WorkerConfig":
        """Load configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            github_token=os.getenv("GITHUB_TOKEN", ""),
            graphql_url=os.getenv("GITHUB_GRAPHQL_URL", "https://api.github.com/graphql"),
            enrichment_url_template=os.getenv("FILES_API", DEFAULT_ENRICHMENT_URL_TEMPLATE),
            mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
            mongodb_database=os.getenv("MONGODB_DATABASE", "dashboard"),
            mongodb_collection=os.getenv("MONGODB_COLLECTION", "git_metrics"),
            http_host=os.getenv("HTTP_HOST", "0.0.0.0"),
            http_port=int(os.getenv("HTTP_PORT", "8080")),
            temporal_host=os.getenv("TEMPORAL_HOST", "localhost:7233"),
            harvest_users=os.getenv("HARVEST_USERS", ""),
            harvest=HarvestTuning(
                page_size=int(os.getenv("HARVEST_PAGE_SIZE", "100")),
                request_timeout=float(os.getenv("HARVEST_REQUEST_TIMEOUT", "30.0")),
                store_timeout=float(os.getenv("HARVEST_STORE_TIMEOUT", "10.0")),
                repo_concurrency=int(os.getenv("HARVEST_REPO_CONCURRENCY", "4")),
                enrichment_concurrency=int(
                    os.getenv("HARVEST_ENRICHMENT_CONCURRENCY", "8")
                ),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> WorkerConfig:
    """Process-wide configuration, loaded once."""
    return WorkerConfig.from_env()
