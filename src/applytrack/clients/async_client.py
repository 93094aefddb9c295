"""Construction of the shared httpx client."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from httpx import AsyncClient
from loguru import logger

from applytrack.config import ApplytrackConfig, get_config


def create_client(config: ApplytrackConfig) -> AsyncClient:
    """Create an AsyncClient pointed at the configured backend."""
    return AsyncClient(
        base_url=config.base_url,
        timeout=httpx.Timeout(config.request_timeout),
        headers={"Accept": "application/json"},
    )


@asynccontextmanager
async def get_client(config: Optional[ApplytrackConfig] = None) -> AsyncIterator[AsyncClient]:
    """Yield an AsyncClient for the lifetime of one command or session.

    Usage:
        async with get_client() as http_client:
            store = RemoteStore(http_client)
    """
    config = config or get_config()
    logger.debug(f"Opening HTTP client for {config.base_url}")
    async with create_client(config) as client:
        yield client
