"""数据模型 -- GenerationParams + TokenUsage + ModelCallResult"""

from pydantic import BaseModel, Field


class GenerationParams(BaseModel):
    """单次生成参数

    max_tokens 是唯一的输出上限，temperature 固定，不做重试。
    """

    temperature: float = Field(ge=0.0, le=2.0, description="采样温度")
    max_tokens: int = Field(gt=0, description="最大输出 token 数")
    json_mode: bool = Field(
        default=False,
        description="是否要求 provider 以 JSON object 形式输出",
    )


# 单词标签：低温度 + 极短输出
LABEL_GENERATION = GenerationParams(temperature=0.3, max_tokens=16)

# 结构化建议：中等温度 + JSON object 输出
SUGGESTION_GENERATION = GenerationParams(temperature=0.5, max_tokens=800, json_mode=True)


class TokenUsage(BaseModel):
    """Token 使用统计

    key 命名对齐 OpenAI/LiteLLM 行业标准：
    prompt_tokens / completion_tokens / total_tokens
    """

    prompt_tokens: int = Field(default=0, ge=0, description="输入 token 数")
    completion_tokens: int = Field(default=0, ge=0, description="输出 token 数")
    total_tokens: int = Field(default=0, ge=0, description="总 token 数")


class ModelCallResult(BaseModel):
    """模型调用结果"""

    content: str = Field(description="模型响应文本内容（非空）")
    model_name: str = Field(default="", description="实际调用的模型名称")
    provider: str = Field(default="", description="实际 provider（如 openai）")
    duration_ms: int = Field(ge=0, description="端到端耗时（毫秒）")
    token_usage: TokenUsage = Field(
        default_factory=TokenUsage,
        description="Token 使用详情",
    )
