"""CLI 入口模块 -- python -m smarttask.gateway

环境变量：
  SMARTTASK_HOST  监听地址（默认 127.0.0.1）
  SMARTTASK_PORT  监听端口（默认 8000）
"""

import os

import uvicorn


def main() -> None:
    """启动 uvicorn"""
    host = os.environ.get("SMARTTASK_HOST", "127.0.0.1")
    port = int(os.environ.get("SMARTTASK_PORT", "8000"))
    uvicorn.run("smarttask.gateway.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
