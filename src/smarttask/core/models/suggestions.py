"""TaskSuggestions -- 智能建议值对象

只能经由 sanitizer 的默认值/截断规则构造，不持久化。
对外序列化使用 camelCase 字段名。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_PRIORITY_LEVEL = 3
UNKNOWN_ESTIMATE = "Unknown"
MAX_SUBTASKS = 4
MAX_IMPROVEMENTS = 3


class TaskSuggestions(BaseModel):
    """智能建议

    字段:
        priority_level: 1-5 整数
        suggested_subtasks: 子任务列表（0-4 项）
        improvements: 改进建议列表（0-3 项）
        estimated_time: 预估耗时文本，缺失时为 "Unknown"
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    priority_level: int = Field(default=DEFAULT_PRIORITY_LEVEL, ge=1, le=5)
    # 条目本身不做类型校验，原样透传
    suggested_subtasks: list[Any] = Field(default_factory=list, max_length=MAX_SUBTASKS)
    improvements: list[Any] = Field(default_factory=list, max_length=MAX_IMPROVEMENTS)
    estimated_time: str = Field(default=UNKNOWN_ESTIMATE, min_length=1)

    def to_response(self) -> dict[str, Any]:
        """序列化为 HTTP 响应体（camelCase）"""
        return self.model_dump(by_alias=True)
