"""HTTP server for CommitWorker.

Exposes HarvestForUser as ``GET /commits?user=<login>`` and a store health
check. The runtime (store + GitHub clients) is opened in the app lifespan.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import WorkerConfig, get_config
from .harvester.boundary import harvest_for_user
from .harvester.errors import StorageError
from .harvester.runtime import HarvestRuntime, open_runtime

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[WorkerConfig] = None,
    runtime: Optional[HarvestRuntime] = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: Worker configuration (default: get_config())
        runtime: Ready runtime to use instead of opening one in the lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if runtime is not None:
            app.state.runtime = runtime
            yield
            return

        async with open_runtime(config or get_config()) as opened:
            app.state.runtime = opened
            yield
        logger.info("Harvest runtime closed")

    app = FastAPI(title="commitworker", lifespan=lifespan)

    @app.get("/commits")
    async def harvest_commits(request: Request, user: Optional[str] = None):
        outcome = await harvest_for_user(request.app.state.runtime.orchestrator, user)
        return JSONResponse(status_code=outcome.status_code, content=outcome.body)

    @app.get("/health")
    async def health(request: Request):
        try:
            await request.app.state.runtime.store.ping()
        except StorageError as e:
            return JSONResponse(status_code=503, content={"status": "unavailable", "error": str(e)})
        return {"status": "ok"}

    return app


def serve(config: Optional[WorkerConfig] = None) -> None:
    """Run the HTTP server until interrupted."""
    import uvicorn

    config = config or get_config()
    logger.info(f"Server is running on {config.http_host}:{config.http_port}")
    uvicorn.run(create_app(config), host=config.http_host, port=config.http_port)


__all__ = ["create_app", "serve"]
