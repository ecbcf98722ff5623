"""枚举定义

包含 TaskLabel 封闭标签集合、EnrichmentState 打标签流程状态机，
以及 VALID_TRANSITIONS 合法流转映射和 TERMINAL_STATES 终态集合。
"""

from enum import StrEnum


class TaskLabel(StrEnum):
    """任务标签 -- 封闭集合，声明顺序即匹配优先级"""

    WORK = "work"
    PERSONAL = "personal"
    PRIORITY = "priority"
    SHOPPING = "shopping"
    HOME = "home"


class EnrichmentState(StrEnum):
    """创建任务 + 自动打标签流程的状态机

    所有路径（包括打标签失败）最终都到达 DONE；
    只有鉴权失败和写入失败会以异常中止。
    """

    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATED = "AUTHENTICATED"
    TASK_PERSISTED = "TASK_PERSISTED"
    LABEL_ATTEMPTED = "LABEL_ATTEMPTED"
    DONE = "DONE"


VALID_TRANSITIONS: dict[EnrichmentState, set[EnrichmentState]] = {
    EnrichmentState.UNAUTHENTICATED: {EnrichmentState.AUTHENTICATED},
    EnrichmentState.AUTHENTICATED: {EnrichmentState.TASK_PERSISTED},
    # 未配置 provider 时直接跳到 DONE
    EnrichmentState.TASK_PERSISTED: {
        EnrichmentState.LABEL_ATTEMPTED,
        EnrichmentState.DONE,
    },
    EnrichmentState.LABEL_ATTEMPTED: {EnrichmentState.DONE},
    EnrichmentState.DONE: set(),
}

TERMINAL_STATES: set[EnrichmentState] = {EnrichmentState.DONE}


def validate_transition(from_state: EnrichmentState, to_state: EnrichmentState) -> bool:
    """验证状态流转是否合法

    Args:
        from_state: 当前状态
        to_state: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_state, set())
    return to_state in allowed
