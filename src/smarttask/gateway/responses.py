"""CORS 响应辅助

两个 AI 端点允许任意来源调用；所有响应（含错误与预检）都带 CORS 头。
"""

from typing import Any

from starlette.responses import JSONResponse, Response

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def cors_json(content: Any, status_code: int = 200) -> JSONResponse:
    """带 CORS 头的 JSON 响应"""
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


def error_response(message: str, status_code: int = 400) -> JSONResponse:
    """用户可见错误：只有一个 error 字段"""
    return cors_json({"error": message}, status_code=status_code)


def preflight_response() -> Response:
    """OPTIONS 预检：204，无响应体"""
    return Response(status_code=204, headers=CORS_HEADERS)
