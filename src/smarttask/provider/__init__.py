"""SmartTask Provider -- 生成式模型调用抽象层

provider 子包的公开接口导出。
"""

# 核心组件
from .client import ModelGateway, classify_provider_error

# 配置
from .config import ProviderConfig, load_provider_config

# 异常
from .exceptions import (
    AuthError,
    ConfigurationError,
    EmptyResponse,
    ProviderError,
    ProviderUnavailable,
    RateLimitError,
)

# 数据模型
from .models import (
    LABEL_GENERATION,
    SUGGESTION_GENERATION,
    GenerationParams,
    ModelCallResult,
    TokenUsage,
)

__all__ = [
    "ModelGateway",
    "classify_provider_error",
    "ProviderConfig",
    "load_provider_config",
    "GenerationParams",
    "LABEL_GENERATION",
    "SUGGESTION_GENERATION",
    "ModelCallResult",
    "TokenUsage",
    "ProviderError",
    "ConfigurationError",
    "AuthError",
    "RateLimitError",
    "ProviderUnavailable",
    "EmptyResponse",
]
