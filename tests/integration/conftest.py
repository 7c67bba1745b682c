"""API fixtures: the app wired to the per-test store."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from movilidad.api import create_app
from movilidad.database import LedgerStore
from movilidad.ledger import LedgerConfig


@pytest_asyncio.fixture
async def client(
    store: LedgerStore, ledger_config: LedgerConfig
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    app = create_app(store=store, config=ledger_config)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
