"""依赖注入模块 -- 通过 FastAPI Depends 注入服务实例

协作者实例通过 app.state 管理，在 lifespan 中初始化；
服务对象按请求构造，不持有跨请求的可变状态。
"""

import json
from typing import Any

from fastapi import Request
from smarttask.core.store import Backend
from smarttask.provider import ModelGateway

from .services.suggestion_service import SuggestionService
from .services.task_enrichment import TaskEnrichmentService


def get_backend(request: Request) -> Backend:
    """从 app.state 获取托管平台实例"""
    return request.app.state.backend


def get_model_gateway(request: Request) -> ModelGateway:
    """从 app.state 获取模型网关实例"""
    return request.app.state.model_gateway


def get_enrichment_service(request: Request) -> TaskEnrichmentService:
    return TaskEnrichmentService(get_backend(request), get_model_gateway(request))


def get_suggestion_service(request: Request) -> SuggestionService:
    return SuggestionService(get_backend(request), get_model_gateway(request))


async def read_json_body(request: Request) -> Any:
    """读取 JSON 请求体，非法 JSON 返回 None（由服务层在鉴权后报 InvalidInput）"""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
