"""Prompt 构建

纯函数：相同输入始终得到相同 prompt。title / description 原样嵌入，
不做截断（截断是调用方的职责）。
"""

from .models.enums import TaskLabel

# 描述为空时在建议 prompt 中使用的占位文本
NO_DESCRIPTION_PLACEHOLDER = "No description provided"

LABEL_PROMPT = (
    'Based on this task title: "{title}" and description: "{description}", '
    "suggest ONE of these labels: {labels}. "
    "Reply with just the label word and nothing else."
)

SUGGESTION_PROMPT = """Analyze the following task and provide suggestions in JSON format:

Task Title: "{title}"
Task Description: "{description}"

Provide your analysis as a JSON object with the following structure:
{{
  "priorityLevel": <number between 1-5, where 1 is lowest and 5 is highest>,
  "suggestedSubtasks": [<array of 2-4 specific actionable subtasks as strings>],
  "improvements": [<array of 2-3 suggestions to improve the task description or approach as strings>],
  "estimatedTime": "<estimated time to complete (e.g., '30 minutes', '2 hours', '1 day')>"
}}

Consider:
- Priority level based on urgency and importance
- Break down the task into specific, actionable subtasks
- Suggest improvements for clarity, efficiency, or completeness
- Provide a realistic time estimate

Return ONLY valid JSON, no additional text."""


def build_label_prompt(title: str, description: str | None = None) -> str:
    """构建单词标签 prompt，要求只回复封闭集合中的一个词"""
    return LABEL_PROMPT.format(
        title=title,
        description=description or "",
        labels=", ".join(label.value for label in TaskLabel),
    )


def build_suggestion_prompt(title: str, description: str | None = None) -> str:
    """构建结构化建议 prompt，要求只返回 JSON object"""
    return SUGGESTION_PROMPT.format(
        title=title,
        description=description or NO_DESCRIPTION_PLACEHOLDER,
    )
