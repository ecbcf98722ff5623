"""请求体模型 + 校验辅助

请求体在鉴权之后才校验，校验失败统一转换为 InvalidInput（400），
不使用 FastAPI 默认的 422 响应。
"""

from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from smarttask.core.exceptions import InvalidInput
from smarttask.core.models import PRIORITY_MAX, PRIORITY_MIN

TITLE_REQUIRED = "Task title is required"

ModelT = TypeVar("ModelT", bound=BaseModel)


class SuggestionRequest(BaseModel):
    """POST /get-task-suggestions 请求体"""

    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError(TITLE_REQUIRED)
        return value


class CreateTaskRequest(SuggestionRequest):
    """POST /create-task-with-ai 请求体"""

    priority_level: int | None = Field(
        default=None,
        ge=PRIORITY_MIN,
        le=PRIORITY_MAX,
        description="优先级 1-5，未提供时为 null",
    )


def parse_body(model: type[ModelT], body: Any) -> ModelT:
    """校验请求体

    Raises:
        InvalidInput: 请求体不是 JSON object 或字段校验失败
    """
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object")
    try:
        return model.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0]
        if first["loc"] and first["loc"][0] == "title":
            raise InvalidInput(TITLE_REQUIRED) from e
        field = ".".join(str(part) for part in first["loc"]) or "body"
        raise InvalidInput(f"Invalid {field}: {first['msg']}") from e
