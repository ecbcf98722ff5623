"""调用者鉴权 -- bearer token 解析 + 身份服务换取用户"""

import structlog
from smarttask.core.exceptions import Unauthorized
from smarttask.core.models import CallerIdentity
from smarttask.core.store import BackendSession

log = structlog.get_logger()


def parse_bearer(authorization: str | None) -> str:
    """从 Authorization 头提取 token

    Raises:
        Unauthorized: 头缺失或不是 "Bearer <token>" 形式
    """
    if not authorization or not authorization.strip():
        raise Unauthorized("No authorization header")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise Unauthorized("Invalid authorization header")
    return token


async def authenticate(session: BackendSession) -> CallerIdentity:
    """用会话 token 换取调用者身份

    Raises:
        Unauthorized: token 无效或用户不存在
    """
    user = await session.auth.get_user()
    if user is None:
        raise Unauthorized("No user found")
    structlog.contextvars.bind_contextvars(user_id=user.user_id)
    return user
