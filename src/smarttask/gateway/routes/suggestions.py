"""智能建议路由

POST /get-task-suggestions: 根据 title/description 返回结构化建议，不持久化。
OPTIONS /get-task-suggestions: CORS 预检。
"""

import structlog
from fastapi import APIRouter, Depends, Header, Request
from smarttask.core.exceptions import SmartTaskError
from smarttask.provider import (
    AuthError,
    ConfigurationError,
    EmptyResponse,
    ProviderError,
    ProviderUnavailable,
    RateLimitError,
)

from ..deps import get_suggestion_service, read_json_body
from ..responses import cors_json, error_response, preflight_response
from ..services.suggestion_service import SuggestionService

log = structlog.get_logger()

router = APIRouter()

# provider 原始错误文本可能带有凭证片段或内部标识，只写入日志
PROVIDER_ERROR_MESSAGES: dict[type[ProviderError], str] = {
    AuthError: "AI provider rejected the configured API key",
    RateLimitError: "AI provider quota exceeded, please try again later",
    ProviderUnavailable: "AI provider is unavailable, please try again later",
    EmptyResponse: "OpenAI returned empty response",
}
GENERIC_FAILURE_MESSAGE = "Failed to get suggestions"


def provider_error_message(error: ProviderError) -> str:
    """provider 错误 -> 固定的用户可见文本"""
    return PROVIDER_ERROR_MESSAGES.get(type(error), GENERIC_FAILURE_MESSAGE)


@router.options("/get-task-suggestions")
async def suggestions_preflight():
    """CORS 预检 -- 204 无响应体"""
    return preflight_response()


@router.post("/get-task-suggestions")
async def get_task_suggestions(
    request: Request,
    authorization: str | None = Header(default=None),
    service: SuggestionService = Depends(get_suggestion_service),
):
    """获取智能建议

    - 成功返回 200 + {priorityLevel, suggestedSubtasks, improvements, estimatedTime}
    - 未配置 provider 凭证返回 500
    - 其余错误（鉴权、缺少 title、模型失败、解析失败）返回 400
    """
    body = await read_json_body(request)
    try:
        suggestions = await service.get_suggestions(authorization, body)
    except ConfigurationError as e:
        return error_response(e.message, status_code=500)
    except ProviderError as e:
        log.warning(
            "suggestions_provider_failed",
            error_class=type(e).__name__,
            provider_status=e.status_code,
            provider_code=e.code,
            error=e.message,
        )
        return error_response(provider_error_message(e), status_code=400)
    except SmartTaskError as e:
        log.warning("suggestions_rejected", error_class=type(e).__name__, error=e.message)
        return error_response(e.message, status_code=400)
    except Exception:
        log.exception("suggestions_failed")
        return error_response(GENERIC_FAILURE_MESSAGE, status_code=400)

    return cors_json(suggestions.to_response())
