"""TaskEnrichmentService -- 创建任务 + 尽力而为的自动打标签

状态机：
    UNAUTHENTICATED -> AUTHENTICATED -> TASK_PERSISTED -> LABEL_ATTEMPTED -> DONE
                                                    \\-----------------------> DONE

1. 鉴权失败：Unauthorized，不创建任务
2. 插入任务失败：PersistenceError，唯一不返回任务的中止路径
3. 打标签（未配置 provider / 模型失败 / 标签无效）：记录日志后继续，返回未打标签的任务
4. 回写标签失败：记录日志，返回回写前的任务

任何打标签阶段的失败都不会传递给调用方。
"""

from dataclasses import dataclass, field
from typing import Any

import structlog
from smarttask.core.exceptions import PersistenceError
from smarttask.core.models import (
    EnrichmentState,
    NewTask,
    Task,
    TaskLabel,
    validate_transition,
)
from smarttask.core.prompts import build_label_prompt
from smarttask.core.sanitizer import extract_label
from smarttask.core.store import Backend, BackendSession
from smarttask.provider import LABEL_GENERATION, ModelGateway, ProviderError

from ..schemas import CreateTaskRequest, parse_body
from .auth import authenticate, parse_bearer

log = structlog.get_logger()


class EnrichmentTransitionError(RuntimeError):
    """状态机非法流转（编程错误）"""


@dataclass
class EnrichmentOutcome:
    """一次创建请求的结果"""

    task: Task
    state: EnrichmentState = EnrichmentState.DONE
    label: TaskLabel | None = None
    label_applied: bool = False
    history: list[EnrichmentState] = field(default_factory=list)


class _EnrichmentRun:
    """单次请求的状态追踪"""

    def __init__(self) -> None:
        self.state = EnrichmentState.UNAUTHENTICATED
        self.history: list[EnrichmentState] = [self.state]

    def advance(self, to_state: EnrichmentState, **log_fields: Any) -> None:
        if not validate_transition(self.state, to_state):
            raise EnrichmentTransitionError(f"{self.state} -> {to_state}")
        log.debug(
            "enrichment_state_transition",
            from_state=self.state.value,
            to_state=to_state.value,
            **log_fields,
        )
        self.state = to_state
        self.history.append(to_state)

    def finish(
        self,
        task: Task,
        label: TaskLabel | None = None,
        label_applied: bool = False,
    ) -> EnrichmentOutcome:
        self.advance(EnrichmentState.DONE, task_id=task.task_id)
        return EnrichmentOutcome(
            task=task,
            state=self.state,
            label=label,
            label_applied=label_applied,
            history=list(self.history),
        )


class TaskEnrichmentService:
    """任务创建业务服务"""

    def __init__(self, backend: Backend, model_gateway: ModelGateway) -> None:
        self._backend = backend
        self._gateway = model_gateway

    async def create_task(self, authorization: str | None, body: Any) -> EnrichmentOutcome:
        """创建任务并尝试自动打标签

        Args:
            authorization: Authorization 请求头原文
            body: 已解析的 JSON 请求体（非 JSON 时为 None）

        Returns:
            EnrichmentOutcome，task 总是已持久化的任务

        Raises:
            Unauthorized: 缺少或无效的凭证
            InvalidInput: 请求体校验失败
            PersistenceError: 插入任务失败
        """
        run = _EnrichmentRun()
        token = parse_bearer(authorization)

        async with self._backend.session(token) as session:
            user = await authenticate(session)
            run.advance(EnrichmentState.AUTHENTICATED, user_id=user.user_id)

            request = parse_body(CreateTaskRequest, body)
            task = await session.tasks.insert_task(
                NewTask(
                    user_id=user.user_id,
                    title=request.title,
                    description=request.description,
                    completed=False,
                    priority_level=request.priority_level,
                )
            )
            run.advance(EnrichmentState.TASK_PERSISTED, task_id=task.task_id)
            log.info("task_created", task_id=task.task_id)

            if not self._gateway.is_configured:
                log.warning(
                    "label_skipped_no_provider",
                    task_id=task.task_id,
                    hint="set OPENAI_API_KEY to enable AI labels",
                )
                return run.finish(task)

            label = await self._suggest_label(task)
            run.advance(EnrichmentState.LABEL_ATTEMPTED, label=label)
            if label is None:
                return run.finish(task)

            return await self._apply_label(run, session, task, label)

    async def _suggest_label(self, task: Task) -> TaskLabel | None:
        """调用模型获取标签，任何 provider 失败都返回 None"""
        prompt = build_label_prompt(task.title, task.description)
        try:
            result = await self._gateway.complete(prompt, LABEL_GENERATION)
        except ProviderError as e:
            log.warning(
                "label_provider_failed",
                task_id=task.task_id,
                error_class=type(e).__name__,
                provider_status=e.status_code,
                provider_code=e.code,
                error=e.message,
            )
            return None

        label = extract_label(result.content)
        if label is None:
            log.warning(
                "label_rejected",
                task_id=task.task_id,
                raw_response=result.content,
                valid_labels=[lbl.value for lbl in TaskLabel],
            )
        return label

    async def _apply_label(
        self,
        run: _EnrichmentRun,
        session: BackendSession,
        task: Task,
        label: TaskLabel,
    ) -> EnrichmentOutcome:
        """回写标签，失败时返回回写前的任务"""
        try:
            updated = await session.tasks.update_task(task.task_id, label=label.value)
        except PersistenceError as e:
            log.error(
                "label_patch_failed",
                task_id=task.task_id,
                label=label.value,
                error=e.message,
                status_code=e.status_code,
            )
            return run.finish(task, label=label)

        log.info("label_applied", task_id=task.task_id, label=label.value)
        return run.finish(updated, label=label, label_applied=True)
