"""后端协作者 Protocol 接口定义

身份服务与任务存储均由外部托管平台提供，此处只定义契约，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from ..models.identity import AuthSession, CallerIdentity
from ..models.task import NewTask, Task


class IdentityService(Protocol):
    """身份服务接口 -- 会话已绑定调用者的 bearer token"""

    async def get_user(self) -> CallerIdentity | None:
        """用会话 token 换取调用者身份，token 无效时返回 None"""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        """邮箱密码登录，返回新会话"""
        ...


class TaskStore(Protocol):
    """Task 存储接口

    行级策略由平台强制：跨用户读取返回空，而不是报错。
    """

    async def insert_task(self, task: NewTask) -> Task:
        """插入任务并返回服务端生成的完整行"""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务（不可见时返回 None）"""
        ...

    async def list_tasks(self) -> list[Task]:
        """查询当前用户可见的任务，按 created_at 倒序"""
        ...

    async def update_task(self, task_id: str, **fields: Any) -> Task:
        """更新任务字段并返回更新后的行"""
        ...

    async def delete_task(self, task_id: str) -> bool:
        """删除任务，返回是否删除了可见的行"""
        ...


class BackendSession(Protocol):
    """单个请求内的短生命周期会话"""

    auth: IdentityService
    tasks: TaskStore


class Backend(Protocol):
    """托管平台入口 -- 每个请求打开一个独立会话"""

    def session(
        self, access_token: str | None = None
    ) -> AbstractAsyncContextManager[BackendSession]:
        """打开绑定 access_token 的会话"""
        ...

    async def health_check(self) -> bool:
        """检查平台可达性，不抛出异常"""
        ...
