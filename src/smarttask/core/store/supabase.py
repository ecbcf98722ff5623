"""Supabase 实现 -- 身份服务（GoTrue）+ 任务存储（PostgREST）

每个请求通过 SupabaseBackend.session() 打开一个独立的 httpx.AsyncClient，
携带 apikey 与调用者的 bearer token，使平台的行级策略生效。
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from ..config import BackendConfig
from ..exceptions import InvalidInput, PersistenceError, Unauthorized
from ..models.identity import AuthSession, CallerIdentity
from ..models.task import NewTask, Task

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

TASKS_TABLE = "tasks"

# 允许通过 update_task 修改的列
UPDATABLE_FIELDS = frozenset({"title", "description", "completed", "priority_level", "label"})

_RETURN_REPRESENTATION = {"Prefer": "return=representation"}


def _error_message(response: httpx.Response) -> str:
    """提取平台错误描述（PostgREST: message；GoTrue: error_description / msg）"""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "error_description", "msg", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or f"HTTP {response.status_code}"


def _identity_from(data: dict[str, Any]) -> CallerIdentity:
    return CallerIdentity(user_id=str(data["id"]), email=data.get("email"))


def _to_task(row: dict[str, Any]) -> Task:
    """平台返回的行 -> Task，结构不符时抛出 PersistenceError"""
    try:
        return Task.model_validate(row)
    except ValidationError as e:
        log.error("task_row_invalid", error_count=e.error_count())
        raise PersistenceError("Task store returned an invalid row") from e


class SupabaseIdentityService:
    """身份服务（GoTrue /auth/v1）"""

    def __init__(self, client: httpx.AsyncClient, config: BackendConfig) -> None:
        self._client = client
        self._auth_url = config.auth_url

    async def get_user(self) -> CallerIdentity | None:
        """GET /user -- 401/403 表示 token 无效，返回 None

        Raises:
            Unauthorized: 身份服务不可达或返回 5xx
        """
        try:
            resp = await self._client.get(f"{self._auth_url}/user")
        except httpx.HTTPError as e:
            log.error("identity_lookup_failed", error=str(e), error_type=type(e).__name__)
            raise Unauthorized("Identity service unavailable") from e

        if resp.status_code in (401, 403):
            log.info("identity_token_rejected", status_code=resp.status_code)
            return None
        if resp.status_code >= 500:
            log.error("identity_lookup_failed", status_code=resp.status_code)
            raise Unauthorized("Identity service unavailable")
        if resp.status_code != 200:
            log.warning(
                "identity_lookup_rejected",
                status_code=resp.status_code,
                error=_error_message(resp),
            )
            return None

        try:
            data = resp.json()
        except ValueError as e:
            log.error("identity_lookup_failed", status_code=resp.status_code, error="non-JSON body")
            raise Unauthorized("Identity service unavailable") from e
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return _identity_from(data)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """POST /token?grant_type=password

        Raises:
            Unauthorized: 凭证被拒绝或身份服务不可达
        """
        try:
            resp = await self._client.post(
                f"{self._auth_url}/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except httpx.HTTPError as e:
            log.error("sign_in_failed", error=str(e), error_type=type(e).__name__)
            raise Unauthorized("Identity service unavailable") from e

        if resp.status_code != 200:
            message = _error_message(resp)
            log.info("sign_in_rejected", status_code=resp.status_code, error=message)
            raise Unauthorized(message)

        try:
            data = resp.json()
            return AuthSession(
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token"),
                expires_in=data.get("expires_in"),
                user=_identity_from(data["user"]),
            )
        except (ValueError, KeyError, TypeError) as e:
            log.error("sign_in_failed", status_code=resp.status_code, error="malformed session")
            raise Unauthorized("Identity service unavailable") from e


class SupabaseTaskStore:
    """TaskStore 的 PostgREST 实现"""

    def __init__(self, client: httpx.AsyncClient, config: BackendConfig) -> None:
        self._client = client
        self._url = f"{config.rest_url}/{TASKS_TABLE}"

    async def insert_task(self, task: NewTask) -> Task:
        """插入任务并返回完整行"""
        rows = await self._request(
            "POST",
            json=task.model_dump(mode="json"),
            headers=_RETURN_REPRESENTATION,
        )
        if not rows:
            raise PersistenceError("Task insert returned no row")
        return _to_task(rows[0])

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        rows = await self._request(
            "GET",
            params={"task_id": f"eq.{task_id}", "select": "*"},
        )
        if not rows:
            return None
        return _to_task(rows[0])

    async def list_tasks(self) -> list[Task]:
        """查询任务列表，按 created_at 倒序"""
        rows = await self._request(
            "GET",
            params={"select": "*", "order": "created_at.desc"},
        )
        return [_to_task(row) for row in rows]

    async def update_task(self, task_id: str, **fields: Any) -> Task:
        """更新任务字段

        Raises:
            InvalidInput: 包含不可更新的字段
            PersistenceError: 更新失败或没有匹配的可见行
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidInput(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if not fields:
            raise InvalidInput("No fields to update")

        rows = await self._request(
            "PATCH",
            params={"task_id": f"eq.{task_id}"},
            json=fields,
            headers=_RETURN_REPRESENTATION,
        )
        if not rows:
            raise PersistenceError("Task not found")
        return _to_task(rows[0])

    async def delete_task(self, task_id: str) -> bool:
        """删除任务"""
        rows = await self._request(
            "DELETE",
            params={"task_id": f"eq.{task_id}"},
            headers=_RETURN_REPRESENTATION,
        )
        return bool(rows)

    async def _request(self, method: str, **kwargs: Any) -> list[dict[str, Any]]:
        """发送请求，传输失败、非 2xx 或响应体不是 JSON 行列表时统一抛出 PersistenceError"""
        try:
            resp = await self._client.request(method, self._url, **kwargs)
        except httpx.HTTPError as e:
            log.error(
                "task_store_request_failed",
                method=method,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PersistenceError(f"Task store unavailable: {e}") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            log.warning(
                "task_store_request_rejected",
                method=method,
                status_code=resp.status_code,
                error=message,
            )
            raise PersistenceError(message, status_code=resp.status_code)

        if resp.status_code == 204 or not resp.content:
            return []
        try:
            data = resp.json()
        except ValueError as e:
            log.error(
                "task_store_response_invalid",
                method=method,
                status_code=resp.status_code,
                content_type=resp.headers.get("content-type"),
            )
            raise PersistenceError(
                "Task store returned an invalid response", status_code=resp.status_code
            ) from e

        if isinstance(data, dict):
            return [data]
        if isinstance(data, list) and all(isinstance(row, dict) for row in data):
            return data
        log.error("task_store_response_invalid", method=method, json_type=type(data).__name__)
        raise PersistenceError(
            "Task store returned an invalid response", status_code=resp.status_code
        )


class SupabaseSession:
    """单请求会话：auth + tasks 共享一个 httpx 客户端"""

    def __init__(self, client: httpx.AsyncClient, config: BackendConfig) -> None:
        self.auth = SupabaseIdentityService(client, config)
        self.tasks = SupabaseTaskStore(client, config)


class SupabaseBackend:
    """托管平台入口"""

    def __init__(
        self,
        config: BackendConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: 平台配置
            transport: 可选 httpx transport（测试注入 MockTransport）
        """
        self._config = config
        self._transport = transport

    @asynccontextmanager
    async def session(self, access_token: str | None = None) -> AsyncIterator[SupabaseSession]:
        """打开绑定调用者 token 的会话，请求结束即关闭连接"""
        anon_key = self._config.anon_key.get_secret_value()
        headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {access_token or anon_key}",
        }
        async with httpx.AsyncClient(
            headers=headers,
            timeout=self._config.timeout_s,
            transport=self._transport,
        ) as client:
            yield SupabaseSession(client, self._config)

    async def health_check(self) -> bool:
        """GET {auth_url}/health，任何异常都返回 False"""
        url = f"{self._config.auth_url}/health"
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(
                    url,
                    headers={"apikey": self._config.anon_key.get_secret_value()},
                    timeout=HEALTH_CHECK_TIMEOUT_S,
                )
                return resp.status_code == 200
        except Exception as e:
            log.debug("health_check_failed", url=url, error=str(e))
            return False
