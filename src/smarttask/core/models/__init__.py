"""SmartTask Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    EnrichmentState,
    TaskLabel,
    validate_transition,
)
from .identity import AuthSession, CallerIdentity
from .suggestions import (
    DEFAULT_PRIORITY_LEVEL,
    MAX_IMPROVEMENTS,
    MAX_SUBTASKS,
    UNKNOWN_ESTIMATE,
    TaskSuggestions,
)
from .task import PRIORITY_MAX, PRIORITY_MIN, NewTask, Task

__all__ = [
    # 枚举
    "TaskLabel",
    "EnrichmentState",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "validate_transition",
    # Task
    "Task",
    "NewTask",
    "PRIORITY_MIN",
    "PRIORITY_MAX",
    # Suggestions
    "TaskSuggestions",
    "DEFAULT_PRIORITY_LEVEL",
    "UNKNOWN_ESTIMATE",
    "MAX_SUBTASKS",
    "MAX_IMPROVEMENTS",
    # Identity
    "CallerIdentity",
    "AuthSession",
]
