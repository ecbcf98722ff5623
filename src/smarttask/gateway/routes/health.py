"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 provider 凭证配置与托管平台可达性。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查

    检查项：
    1. provider: 凭证是否配置（缺失只降级打标签，不影响 ready）
    2. backend: 托管平台身份服务可达性
    """
    checks = {}
    all_ok = True

    # 1. provider 凭证
    model_gateway = getattr(request.app.state, "model_gateway", None)
    if model_gateway is not None and model_gateway.is_configured:
        checks["provider"] = "configured"
    else:
        checks["provider"] = "missing"

    # 2. 托管平台
    backend = getattr(request.app.state, "backend", None)
    if backend is None:
        checks["backend"] = "unreachable"
        all_ok = False
    else:
        try:
            healthy = await backend.health_check()
        except Exception as e:
            log.warning("health_check_error", error=str(e))
            healthy = False
        checks["backend"] = "ok" if healthy else "unreachable"
        all_ok = all_ok and healthy

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "checks": checks,
        },
    )
