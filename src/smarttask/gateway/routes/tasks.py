"""任务创建路由

POST /create-task-with-ai: 创建任务，尽力而为地附加 AI 标签。
OPTIONS /create-task-with-ai: CORS 预检。
"""

import structlog
from fastapi import APIRouter, Depends, Header, Request
from smarttask.core.exceptions import SmartTaskError

from ..deps import get_enrichment_service, read_json_body
from ..responses import cors_json, error_response, preflight_response
from ..services.task_enrichment import TaskEnrichmentService

log = structlog.get_logger()

router = APIRouter()


@router.options("/create-task-with-ai")
async def create_task_preflight():
    """CORS 预检 -- 204 无响应体"""
    return preflight_response()


@router.post("/create-task-with-ai")
async def create_task_with_ai(
    request: Request,
    authorization: str | None = Header(default=None),
    service: TaskEnrichmentService = Depends(get_enrichment_service),
):
    """创建任务

    - 成功返回 200 + 任务 JSON（label 仅在打标签成功时存在）
    - 鉴权 / 校验 / 写入失败返回 400 {"error": ...}
    """
    body = await read_json_body(request)
    try:
        outcome = await service.create_task(authorization, body)
    except SmartTaskError as e:
        log.warning("create_task_rejected", error_class=type(e).__name__, error=e.message)
        return error_response(e.message, status_code=400)
    except Exception:
        log.exception("create_task_failed")
        return error_response("Failed to create task", status_code=400)

    return cors_json(outcome.task.model_dump(mode="json"))
