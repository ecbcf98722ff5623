"""ModelGateway -- 生成式模型调用封装

通过 litellm.acompletion() 调用 provider：
- 固定 temperature / max_tokens，单次尝试，不重试
- 未配置凭证时在任何网络调用前抛出 ConfigurationError
- provider 错误统一分类为 provider.exceptions 中的异常
- 每次调用输出一条结构化诊断日志（model_call_completed / model_call_failed）
"""

import contextlib
import time

import httpx
import structlog
from litellm import acompletion

from .config import ProviderConfig
from .exceptions import (
    AuthError,
    ConfigurationError,
    EmptyResponse,
    ProviderError,
    ProviderUnavailable,
    RateLimitError,
)
from .models import GenerationParams, ModelCallResult, TokenUsage

log = structlog.get_logger()

# 连接类异常类型集合（归类为 ProviderUnavailable，无状态码）
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    TimeoutError,
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.TimeoutException,
)

# LiteLLM / OpenAI SDK 的连接类异常名
_CONNECTION_ERROR_NAMES = ("APIConnectionError", "APITimeoutError", "Timeout")

# 失败分类 -> 运维提示
_FAILURE_HINTS: dict[type[ProviderError], str] = {
    AuthError: "invalid provider API key, check OPENAI_API_KEY",
    RateLimitError: "provider quota exceeded",
    ProviderUnavailable: "provider service unavailable",
    EmptyResponse: "provider returned no content",
}


def _is_connection_error(e: Exception) -> bool:
    """判断异常是否为连接类错误（provider 不可达）"""
    if isinstance(e, _CONNECTION_ERROR_TYPES):
        return True
    return type(e).__name__ in _CONNECTION_ERROR_NAMES


def _status_of(e: Exception) -> int | None:
    """提取 provider 状态码（LiteLLM 用 status_code，OpenAI SDK 用 status_code/status）"""
    for attr in ("status_code", "status"):
        value = getattr(e, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _code_of(e: Exception) -> str | None:
    """提取 provider 错误码（如 invalid_api_key）"""
    value = getattr(e, "code", None)
    return value if isinstance(value, str) and value else None


def classify_provider_error(e: Exception) -> ProviderError:
    """将 provider SDK 异常转换为分类后的 ProviderError

    Args:
        e: litellm / httpx 抛出的原始异常

    Returns:
        分类后的异常实例（未抛出）
    """
    if isinstance(e, ProviderError):
        return e

    message = str(e) or type(e).__name__
    status = _status_of(e)
    code = _code_of(e)

    if _is_connection_error(e):
        return ProviderUnavailable(f"Provider unreachable: {message}", code=code)
    if status == 401 or code == "invalid_api_key":
        return AuthError(message, status_code=status, code=code)
    if status == 429:
        return RateLimitError(message, status_code=status, code=code)
    if status is not None and status >= 500:
        return ProviderUnavailable(message, status_code=status, code=code)
    return ProviderError(message, recoverable=False, status_code=status, code=code)


def _parse_usage(response) -> TokenUsage:
    """从 LiteLLM 响应解析 token 使用数据，失败时返回全零"""
    usage = getattr(response, "usage", None)
    if usage is None:
        return TokenUsage()
    try:
        return TokenUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        )
    except (TypeError, ValueError) as e:
        log.debug("parse_usage_failed", error=str(e))
        return TokenUsage()


def _extract_content(response) -> str | None:
    """提取首个 choice 的文本内容"""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else None


class ModelGateway:
    """生成式模型网关

    封装 litellm.acompletion()，对调用方只暴露 complete(prompt, params)。
    """

    def __init__(self, config: ProviderConfig) -> None:
        """
        Args:
            config: provider 配置（启动时构造一次）
        """
        self._config = config

    @property
    def is_configured(self) -> bool:
        """provider 凭证是否已配置"""
        return self._config.is_configured

    @property
    def model(self) -> str:
        return self._config.model

    async def complete(self, prompt: str, params: GenerationParams) -> ModelCallResult:
        """发送单条 user prompt，返回原始文本补全

        Args:
            prompt: Prompt 文本
            params: 生成参数（temperature / max_tokens / json_mode）

        Returns:
            ModelCallResult，content 保证非空

        Raises:
            ConfigurationError: 未配置凭证（不会发起网络请求）
            AuthError: 凭证无效
            RateLimitError: 配额耗尽
            ProviderUnavailable: 5xx / 连接失败 / 超时
            EmptyResponse: 调用成功但无文本内容
            ProviderError: 其他 provider 错误
        """
        if not self.is_configured:
            error = ConfigurationError()
            self._log_failure(error, duration_ms=0)
            raise error

        call_kwargs = {
            "model": self._config.model,
            "messages": [{"role": "user", "content": prompt}],
            "api_key": self._config.api_key.get_secret_value(),
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "timeout": self._config.timeout_s,
            # 单次尝试：关闭 SDK 内置重试
            "max_retries": 0,
        }
        if self._config.api_base:
            call_kwargs["api_base"] = self._config.api_base
        if params.json_mode:
            call_kwargs["response_format"] = {"type": "json_object"}

        log.debug(
            "model_call_start",
            model=self._config.model,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            json_mode=params.json_mode,
        )

        start_time = time.monotonic()
        try:
            response = await acompletion(**call_kwargs)
        except Exception as e:
            error = classify_provider_error(e)
            self._log_failure(error, duration_ms=self._elapsed_ms(start_time))
            raise error from e

        duration_ms = self._elapsed_ms(start_time)
        content = _extract_content(response)
        if not content or not content.strip():
            error = EmptyResponse()
            self._log_failure(error, duration_ms=duration_ms)
            raise error

        provider = ""
        with contextlib.suppress(Exception):
            hidden = getattr(response, "_hidden_params", None)
            if isinstance(hidden, dict):
                provider = hidden.get("custom_llm_provider", "") or ""

        result = ModelCallResult(
            content=content,
            model_name=getattr(response, "model", "") or self._config.model,
            provider=provider,
            duration_ms=duration_ms,
            token_usage=_parse_usage(response),
        )

        log.info(
            "model_call_completed",
            outcome="success",
            model=result.model_name,
            provider=result.provider,
            duration_ms=duration_ms,
            total_tokens=result.token_usage.total_tokens,
        )
        return result

    def _log_failure(self, error: ProviderError, duration_ms: int) -> None:
        """输出失败诊断记录（不持久化）"""
        log.error(
            "model_call_failed",
            outcome="failure",
            model=self._config.model,
            duration_ms=duration_ms,
            error_class=type(error).__name__,
            provider_status=error.status_code,
            provider_code=error.code,
            error=error.message,
            hint=_FAILURE_HINTS.get(type(error), "unexpected provider error"),
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)
