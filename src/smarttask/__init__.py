"""SmartTask -- AI 辅助任务管理服务

子包:
    provider: LLM 调用抽象层（Model Gateway）
    core: 领域模型、Prompt 构建、响应清洗、后端协作者
    gateway: FastAPI 应用（HTTP 入口）
"""

__version__ = "0.1.0"
