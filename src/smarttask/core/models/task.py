"""Task Domain Model

tasks 表由外部托管平台持久化，行级策略保证只有所有者可见/可改。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import TaskLabel

# 优先级取值范围（闭区间）
PRIORITY_MIN = 1
PRIORITY_MAX = 5


class NewTask(BaseModel):
    """待插入的任务行（id 与创建时间由服务端生成）"""

    user_id: str = Field(description="所有者用户 ID")
    title: str = Field(min_length=1, description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    completed: bool = Field(default=False, description="是否已完成")
    priority_level: int | None = Field(
        default=None,
        ge=PRIORITY_MIN,
        le=PRIORITY_MAX,
        description="优先级 1-5，未提供时为 null",
    )


class Task(BaseModel):
    """Task 数据模型 -- 对应 tasks 表的一行"""

    task_id: str = Field(description="唯一标识，服务端生成")
    user_id: str = Field(description="所有者用户 ID")
    title: str = Field(description="任务标题")
    description: str | None = Field(default=None, description="任务描述")
    completed: bool = Field(default=False, description="是否已完成")
    priority_level: int | None = Field(
        default=None,
        ge=PRIORITY_MIN,
        le=PRIORITY_MAX,
        description="优先级 1-5",
    )
    label: TaskLabel | None = Field(default=None, description="AI 标签，未打标签时为 null")
    created_at: datetime = Field(description="创建时间")
