"""Provider 异常体系

模型调用失败统一分类为以下异常，携带 provider 返回的状态码 / 错误码，
供调用方决定吸收（打标签）还是透传（智能建议）。
"""


class ProviderError(Exception):
    """Provider 包基础异常"""

    def __init__(
        self,
        message: str,
        recoverable: bool = True,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试恢复（本包自身从不重试）
            status_code: provider 返回的 HTTP 状态码，连接类错误为 None
            code: provider 返回的错误码（如 invalid_api_key）
        """
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable
        self.status_code = status_code
        self.code = code


class ConfigurationError(ProviderError):
    """未配置 provider 凭证 -- 在任何网络调用之前抛出"""

    def __init__(self, message: str = "OpenAI API key is not configured") -> None:
        super().__init__(message, recoverable=False)


class AuthError(ProviderError):
    """provider 拒绝凭证（401 / invalid_api_key）"""

    def __init__(
        self,
        message: str,
        status_code: int | None = 401,
        code: str | None = None,
    ) -> None:
        super().__init__(message, recoverable=False, status_code=status_code, code=code)


class RateLimitError(ProviderError):
    """配额耗尽或限流（429）"""

    def __init__(
        self,
        message: str,
        status_code: int | None = 429,
        code: str | None = None,
    ) -> None:
        super().__init__(message, recoverable=True, status_code=status_code, code=code)


class ProviderUnavailable(ProviderError):
    """provider 不可用：5xx 响应、连接失败或超时

    连接失败/超时时 status_code 为 None。
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, recoverable=True, status_code=status_code, code=code)


class EmptyResponse(ProviderError):
    """调用成功但没有任何文本内容"""

    def __init__(self, message: str = "OpenAI returned empty response") -> None:
        super().__init__(message, recoverable=True)
