"""响应清洗 -- 将不可信的模型输出转换为类型确定的结果

两个入口：
- extract_label(): 原始文本 -> TaskLabel | None
- sanitize_suggestions(): 原始文本 -> TaskSuggestions（仅 JSON 解析失败时抛出）
"""

import json
import math
import re
from typing import Any

import structlog

from .exceptions import MalformedSuggestions
from .models.enums import TaskLabel
from .models.suggestions import (
    DEFAULT_PRIORITY_LEVEL,
    MAX_IMPROVEMENTS,
    MAX_SUBTASKS,
    UNKNOWN_ESTIMATE,
    TaskSuggestions,
)
from .models.task import PRIORITY_MAX, PRIORITY_MIN

log = structlog.get_logger()

_LEADING_NON_ALPHA = re.compile(r"^[^a-z]+")
_TRAILING_NON_ALPHA = re.compile(r"[^a-z]+$")
_WHITESPACE = re.compile(r"\s+")

# 标签必须以完整单词出现（"workshop" 不匹配 work，"work-related" 匹配 work）
_LABEL_PATTERNS: list[tuple[TaskLabel, re.Pattern[str]]] = [
    (label, re.compile(rf"(?<![a-z]){label.value}(?![a-z])")) for label in TaskLabel
]

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)


def clean_label_text(raw: str) -> str:
    """小写、去首尾空白、去首尾非字母、折叠内部空白"""
    text = raw.lower().strip()
    text = _LEADING_NON_ALPHA.sub("", text)
    text = _TRAILING_NON_ALPHA.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def extract_label(raw: str | None) -> TaskLabel | None:
    """从模型原始回复中提取标签

    先在清洗后的文本中按集合顺序查找完整单词，再尝试整体精确匹配；
    都不命中返回 None（不打标签）。
    """
    if not raw:
        return None

    cleaned = clean_label_text(raw)
    for label, pattern in _LABEL_PATTERNS:
        if pattern.search(cleaned):
            return label

    try:
        return TaskLabel(cleaned)
    except ValueError:
        log.debug("label_not_in_set", cleaned=cleaned)
        return None


def _strip_code_fence(raw: str) -> str:
    """去掉 ```json ... ``` 包裹"""
    text = raw.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1).strip() if match else text


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def coerce_priority(value: Any) -> int:
    """非数字 -> 默认 3；数字四舍五入（half-up）后钳制到 [1, 5]"""
    if not _is_number(value) or not math.isfinite(value):
        return DEFAULT_PRIORITY_LEVEL
    return max(PRIORITY_MIN, min(PRIORITY_MAX, _round_half_up(value)))


def _coerce_list(value: Any, limit: int) -> list[Any]:
    if not isinstance(value, list):
        return []
    return value[:limit]


def _coerce_estimate(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return UNKNOWN_ESTIMATE
    return value


def sanitize_suggestions(raw: str) -> TaskSuggestions:
    """将模型返回的 JSON 文本清洗为 TaskSuggestions

    Raises:
        MalformedSuggestions: 文本不是合法 JSON 或不是 JSON object
    """
    # JSONDecodeError 与超长整数都是 ValueError；过深嵌套抛出 RecursionError
    try:
        parsed = json.loads(_strip_code_fence(raw))
    except (ValueError, TypeError, RecursionError) as e:
        log.warning("suggestions_parse_failed", error_class=type(e).__name__)
        raise MalformedSuggestions() from e

    if not isinstance(parsed, dict):
        log.warning("suggestions_not_object", json_type=type(parsed).__name__)
        raise MalformedSuggestions()

    return TaskSuggestions(
        priority_level=coerce_priority(parsed.get("priorityLevel")),
        suggested_subtasks=_coerce_list(parsed.get("suggestedSubtasks"), MAX_SUBTASKS),
        improvements=_coerce_list(parsed.get("improvements"), MAX_IMPROVEMENTS),
        estimated_time=_coerce_estimate(parsed.get("estimatedTime")),
    )
