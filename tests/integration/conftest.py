"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


@pytest.fixture
def integration_app(monkeypatch, backend, model_gateway):
    """集成测试用 FastAPI app（内存平台 + 已配置凭证的网关）"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from smarttask.gateway.main import create_app

    app = create_app()
    app.state.backend = backend
    app.state.model_gateway = model_gateway
    return app


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def mock_llm():
    with patch("smarttask.provider.client.acompletion", new_callable=AsyncMock) as mocked:
        yield mocked
