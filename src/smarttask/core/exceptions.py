"""Core 异常体系

主写入路径（鉴权、持久化）与建议清洗阶段的错误。
message 直接作为用户可见的 error 文本，不包含内部细节。
"""


class SmartTaskError(Exception):
    """Core 包基础异常"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthorized(SmartTaskError):
    """缺少或无效的 bearer 凭证"""


class InvalidInput(SmartTaskError):
    """请求体校验失败（如缺少 title）"""


class PersistenceError(SmartTaskError):
    """托管平台读写失败"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Args:
            message: 平台返回的错误描述
            status_code: 平台 HTTP 状态码，传输层失败时为 None
        """
        super().__init__(message)
        self.status_code = status_code


class MalformedSuggestions(SmartTaskError):
    """模型返回的建议无法解析为 JSON object"""

    def __init__(self, message: str = "Failed to parse AI suggestions") -> None:
        super().__init__(message)
