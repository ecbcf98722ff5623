"""gateway 测试配置 -- FastAPI app（绕过 lifespan 手动注入协作者）+ AsyncClient"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from smarttask.provider import ModelGateway


@pytest.fixture
def make_app(monkeypatch, backend):
    """按需构造 app；gateway 默认使用已配置凭证的网关"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")

    from smarttask.gateway.main import create_app

    def _make(gateway: ModelGateway):
        app = create_app()
        app.state.backend = backend
        app.state.model_gateway = gateway
        return app

    return _make


@pytest.fixture
def app(make_app, model_gateway):
    return make_app(model_gateway)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def unconfigured_client(make_app, unconfigured_gateway) -> AsyncGenerator[AsyncClient, None]:
    """未配置 provider 凭证的客户端"""
    async with AsyncClient(
        transport=ASGITransport(app=make_app(unconfigured_gateway)),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def mock_llm():
    """Patch litellm.acompletion，测试内设置 return_value / side_effect"""
    with patch("smarttask.provider.client.acompletion", new_callable=AsyncMock) as mocked:
        yield mocked
