"""BackendConfig -- 托管平台（身份服务 + 数据服务）配置

可通过环境变量覆盖，进程启动时加载一次。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr, model_validator

log = structlog.get_logger()

DEFAULT_SERVICE_URL = "http://localhost:54321"
DEFAULT_TIMEOUT_S = 10


class BackendConfig(BaseModel):
    """托管平台配置

    环境变量:
        SUPABASE_URL: 服务基础 URL
        SUPABASE_ANON_KEY: 匿名访问 key（随每个请求作为 apikey 头发送）
        SUPABASE_AUTH_URL: 身份服务 URL（默认 {SUPABASE_URL}/auth/v1）
        SMARTTASK_BACKEND_TIMEOUT_S: 请求超时（秒，默认 10）
    """

    service_url: str = Field(default=DEFAULT_SERVICE_URL, description="服务基础 URL")
    anon_key: SecretStr = Field(default=SecretStr(""), description="匿名访问 key")
    auth_url: str = Field(default="", description="身份服务 URL")
    timeout_s: int = Field(default=DEFAULT_TIMEOUT_S, ge=1, description="请求超时（秒）")

    @model_validator(mode="after")
    def _derive_urls(self) -> "BackendConfig":
        self.service_url = self.service_url.rstrip("/")
        if not self.auth_url:
            self.auth_url = f"{self.service_url}/auth/v1"
        self.auth_url = self.auth_url.rstrip("/")
        return self

    @property
    def rest_url(self) -> str:
        """数据服务（PostgREST）URL"""
        return f"{self.service_url}/rest/v1"


def load_backend_config() -> BackendConfig:
    """从环境变量加载托管平台配置"""
    kwargs: dict = {}

    if val := os.environ.get("SUPABASE_URL"):
        kwargs["service_url"] = val.strip()

    if val := os.environ.get("SUPABASE_ANON_KEY"):
        kwargs["anon_key"] = SecretStr(val.strip())

    if val := os.environ.get("SUPABASE_AUTH_URL"):
        kwargs["auth_url"] = val.strip()

    if val := os.environ.get("SMARTTASK_BACKEND_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="SMARTTASK_BACKEND_TIMEOUT_S",
                value=val,
                fallback=DEFAULT_TIMEOUT_S,
            )

    return BackendConfig(**kwargs)
