"""ProviderConfig -- Provider 配置加载

从环境变量加载模型调用配置，进程启动时构造一次并注入到服务中，
运行期不再读取环境变量。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_S = 30


class ProviderConfig(BaseModel):
    """Provider 配置 -- 从环境变量加载

    环境变量:
        OPENAI_API_KEY: provider 凭证（为空表示未配置）
        SMARTTASK_LLM_MODEL: 模型标识（默认 gpt-4o-mini）
        OPENAI_BASE_URL: 自定义 API 地址（默认使用 provider 官方地址）
        SMARTTASK_LLM_TIMEOUT_S: 单次调用超时（秒，默认 30）
    """

    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="provider 凭证",
    )
    model: str = Field(
        default=DEFAULT_MODEL,
        description="模型标识（LiteLLM 命名）",
    )
    api_base: str | None = Field(
        default=None,
        description="自定义 API 地址，None 使用 provider 默认",
    )
    timeout_s: int = Field(
        default=DEFAULT_TIMEOUT_S,
        ge=1,
        description="单次调用超时（秒）",
    )

    @property
    def is_configured(self) -> bool:
        """凭证是否已配置（空白字符串视为未配置）"""
        return bool(self.api_key.get_secret_value().strip())


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 Provider 配置

    Returns:
        ProviderConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("OPENAI_API_KEY"):
        kwargs["api_key"] = SecretStr(val.strip())

    if val := os.environ.get("SMARTTASK_LLM_MODEL"):
        kwargs["model"] = val.strip()

    if val := os.environ.get("OPENAI_BASE_URL"):
        kwargs["api_base"] = val.strip().rstrip("/")

    if val := os.environ.get("SMARTTASK_LLM_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="SMARTTASK_LLM_TIMEOUT_S",
                value=val,
                fallback=DEFAULT_TIMEOUT_S,
            )

    return ProviderConfig(**kwargs)
