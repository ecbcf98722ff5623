"""身份模型 -- 身份服务返回的调用者与会话"""

from pydantic import BaseModel, Field


class CallerIdentity(BaseModel):
    """bearer token 对应的调用者"""

    user_id: str = Field(description="用户 ID")
    email: str | None = Field(default=None, description="邮箱")


class AuthSession(BaseModel):
    """登录会话"""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    user: CallerIdentity
