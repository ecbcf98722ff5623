"""SuggestionService -- 创建任务前的智能建议（不持久化）

与打标签不同，这里没有可回退的结果，所有错误都直接传递给调用方。
"""

from typing import Any

import structlog
from smarttask.core.models import TaskSuggestions
from smarttask.core.prompts import build_suggestion_prompt
from smarttask.core.sanitizer import sanitize_suggestions
from smarttask.core.store import Backend
from smarttask.provider import SUGGESTION_GENERATION, ConfigurationError, ModelGateway

from ..schemas import SuggestionRequest, parse_body
from .auth import authenticate, parse_bearer

log = structlog.get_logger()

MISSING_KEY_MESSAGE = "OpenAI API key is not configured. Please set OPENAI_API_KEY secret."


class SuggestionService:
    """智能建议业务服务"""

    def __init__(self, backend: Backend, model_gateway: ModelGateway) -> None:
        self._backend = backend
        self._gateway = model_gateway

    async def get_suggestions(self, authorization: str | None, body: Any) -> TaskSuggestions:
        """鉴权 -> 校验 -> 调用模型 -> 清洗

        Raises:
            Unauthorized: 缺少或无效的凭证
            InvalidInput: 缺少 title
            ConfigurationError: 未配置 provider 凭证
            ProviderError: 模型调用失败（AuthError / RateLimitError / ...）
            MalformedSuggestions: 模型输出无法解析为 JSON object
        """
        token = parse_bearer(authorization)
        async with self._backend.session(token) as session:
            await authenticate(session)

        request = parse_body(SuggestionRequest, body)

        if not self._gateway.is_configured:
            log.warning("suggestions_skipped_no_provider")
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        log.info("suggestions_requested", title_length=len(request.title))
        result = await self._gateway.complete(
            build_suggestion_prompt(request.title, request.description),
            SUGGESTION_GENERATION,
        )
        suggestions = sanitize_suggestions(result.content)
        log.info(
            "suggestions_generated",
            priority_level=suggestions.priority_level,
            subtask_count=len(suggestions.suggested_subtasks),
            improvement_count=len(suggestions.improvements),
        )
        return suggestions
