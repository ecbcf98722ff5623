"""FastAPI 应用主文件

app 创建 + lifespan 管理：配置加载（仅一次）+ 协作者初始化 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from smarttask.core.config import load_backend_config
from smarttask.core.store import SupabaseBackend
from smarttask.provider import ModelGateway, load_provider_config

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import health, suggestions, tasks

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时加载配置并初始化协作者"""
    load_dotenv()

    provider_config = load_provider_config()
    backend_config = load_backend_config()
    app.state.provider_config = provider_config
    app.state.backend_config = backend_config

    app.state.model_gateway = ModelGateway(provider_config)
    app.state.backend = SupabaseBackend(backend_config)

    log.info(
        "gateway_initialized",
        model=provider_config.model,
        provider_configured=provider_config.is_configured,
        backend_url=backend_config.service_url,
        auth_url=backend_config.auth_url,
    )
    if not provider_config.is_configured:
        log.warning(
            "provider_key_missing",
            message="OPENAI_API_KEY 未设置：任务创建不带标签，智能建议返回 500",
        )

    yield


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="SmartTask Gateway",
        version="0.1.0",
        description="AI 辅助任务管理 API：自动打标签 + 智能建议",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire(app)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(suggestions.router, tags=["suggestions"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
