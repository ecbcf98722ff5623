"""全局 pytest 配置 -- 内存版托管平台 + LLM 响应构造 fixture

InMemoryBackend 模拟行级策略：会话只能看到/修改自己名下的任务，
跨用户读取返回空而不是报错。
"""

from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import pytest
import smarttask.gateway.services.task_enrichment as enrichment_module
import smarttask.provider.client as client_module
from pydantic import SecretStr
from smarttask.core.exceptions import PersistenceError, Unauthorized
from smarttask.core.models import AuthSession, CallerIdentity, NewTask, Task
from smarttask.provider import ModelGateway, ProviderConfig
from structlog import get_logger
from structlog.testing import capture_logs
from ulid import ULID

ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"


class InMemoryIdentityService:
    def __init__(self, backend: "InMemoryBackend", token: str | None) -> None:
        self._backend = backend
        self._token = token

    async def get_user(self) -> CallerIdentity | None:
        if self._token is None:
            return None
        return self._backend.users.get(self._token)

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        for token, user in self._backend.users.items():
            if user.email == email and self._backend.passwords.get(email) == password:
                return AuthSession(access_token=token, user=user)
        raise Unauthorized("Invalid login credentials")


class InMemoryTaskStore:
    def __init__(self, backend: "InMemoryBackend", token: str | None) -> None:
        self._backend = backend
        user = backend.users.get(token) if token else None
        self._owner = user.user_id if user else None

    def _visible(self, row: dict[str, Any]) -> bool:
        return self._owner is not None and row["user_id"] == self._owner

    async def insert_task(self, task: NewTask) -> Task:
        self._backend.insert_calls += 1
        if self._backend.fail_insert:
            raise PersistenceError("insert failed", status_code=500)
        if task.user_id != self._owner:
            raise PersistenceError("new row violates row-level security policy", 403)
        row = {
            "task_id": str(ULID()),
            "created_at": datetime.now(UTC).isoformat(),
            "label": None,
            **task.model_dump(mode="json"),
        }
        self._backend.rows[row["task_id"]] = row
        return Task.model_validate(row)

    async def get_task(self, task_id: str) -> Task | None:
        row = self._backend.rows.get(task_id)
        if row is None or not self._visible(row):
            return None
        return Task.model_validate(row)

    async def list_tasks(self) -> list[Task]:
        rows = [r for r in self._backend.rows.values() if self._visible(r)]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [Task.model_validate(r) for r in rows]

    async def update_task(self, task_id: str, **fields: Any) -> Task:
        self._backend.update_calls += 1
        if self._backend.fail_update:
            raise PersistenceError("update failed", status_code=500)
        row = self._backend.rows.get(task_id)
        if row is None or not self._visible(row):
            raise PersistenceError("Task not found")
        row.update(fields)
        return Task.model_validate(row)

    async def delete_task(self, task_id: str) -> bool:
        row = self._backend.rows.get(task_id)
        if row is None or not self._visible(row):
            return False
        del self._backend.rows[task_id]
        return True


class InMemorySession:
    def __init__(self, backend: "InMemoryBackend", token: str | None) -> None:
        self.auth = InMemoryIdentityService(backend, token)
        self.tasks = InMemoryTaskStore(backend, token)


class InMemoryBackend:
    """内存版托管平台"""

    def __init__(self) -> None:
        self.users: dict[str, CallerIdentity] = {}
        self.passwords: dict[str, str] = {}
        self.rows: dict[str, dict[str, Any]] = {}
        self.insert_calls = 0
        self.update_calls = 0
        self.sessions_opened = 0
        self.fail_insert = False
        self.fail_update = False
        self.healthy = True

    def add_user(self, token: str, user_id: str, email: str, password: str = "pw") -> None:
        self.users[token] = CallerIdentity(user_id=user_id, email=email)
        self.passwords[email] = password

    @asynccontextmanager
    async def session(self, access_token: str | None = None) -> AsyncIterator[InMemorySession]:
        self.sessions_opened += 1
        yield InMemorySession(self, access_token)

    async def health_check(self) -> bool:
        return self.healthy


@pytest.fixture
def backend() -> InMemoryBackend:
    """两个用户（alice / bob）的内存平台"""
    b = InMemoryBackend()
    b.add_user(ALICE_TOKEN, "user-alice", "alice@example.com")
    b.add_user(BOB_TOKEN, "user-bob", "bob@example.com")
    return b


@pytest.fixture
def provider_config() -> ProviderConfig:
    """已配置凭证的 provider 配置"""
    return ProviderConfig(api_key=SecretStr("sk-test"), model="gpt-4o-mini")


@pytest.fixture
def model_gateway(provider_config: ProviderConfig) -> ModelGateway:
    return ModelGateway(provider_config)


@pytest.fixture
def unconfigured_gateway() -> ModelGateway:
    """未配置凭证的网关"""
    return ModelGateway(ProviderConfig())


@pytest.fixture
def make_llm_response() -> Callable[..., MagicMock]:
    """构造 Mock litellm.acompletion 返回"""

    def _make(
        content: str | None = "work",
        model: str = "gpt-4o-mini",
        prompt_tokens: int = 10,
        completion_tokens: int = 2,
    ) -> MagicMock:
        response = MagicMock()
        response.model = model

        choice = MagicMock()
        choice.message.content = content
        response.choices = [choice]

        usage = MagicMock()
        usage.prompt_tokens = prompt_tokens
        usage.completion_tokens = completion_tokens
        usage.total_tokens = prompt_tokens + completion_tokens
        response.usage = usage

        response._hidden_params = {"custom_llm_provider": "openai"}
        return response

    return _make


class FakeProviderError(Exception):
    """带 status_code / code 的 provider SDK 异常替身"""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


@pytest.fixture
def provider_error() -> type[FakeProviderError]:
    return FakeProviderError


@pytest.fixture
def captured_logs(monkeypatch) -> Iterator[list[dict[str, Any]]]:
    """捕获诊断日志记录

    模块级 logger 可能已缓存了首次使用时的处理器链，
    在捕获期间替换为新的 lazy proxy。
    """
    with capture_logs() as logs:
        monkeypatch.setattr(client_module, "log", get_logger())
        monkeypatch.setattr(enrichment_module, "log", get_logger())
        yield logs

