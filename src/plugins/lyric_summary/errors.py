"""
错误分类
把上游失败映射为固定的用户回复
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

NO_LYRICS_TEXT = "No lyrics found. Are you sure you entered a correct song?"
TIMEOUT_TEXT = "Query timed out."
DELIVERY_FAILED_TEXT = "Error contacting Telegram."


class LyricBotError(Exception):
    """项目内所有已知错误的基类"""


class NoLyricsFound(LyricBotError):
    """没有搜索结果，或者歌曲没有歌词"""


class SummarizationTimeout(LyricBotError):
    """总结调用没有在超时时间内完成"""

    def __init__(self, timeout_ms: int):
        super().__init__(f"summarization did not settle within {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class SummarizationError(LyricBotError):
    """总结接口返回了无法使用的响应"""


class DeliveryError(LyricBotError):
    """Telegram 调用失败"""

    def __init__(self, method: str, message: str):
        super().__init__(message)
        self.method = method
        self.message = message


class DeliveryBlocked(DeliveryError):
    """用户屏蔽了 Bot"""


class DeliveryFailed(DeliveryError):
    """sendMessage 调用失败"""


class FailureKind(str, Enum):
    DELIVERY_BLOCKED = "delivery_blocked"
    DELIVERY_FAILED = "delivery_failed"
    DELIVERY_ERROR = "delivery_error"
    NO_LYRICS = "no_lyrics"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


@dataclass
class FailureReply:
    """分类结果，text 为 None 表示不回复用户"""
    kind: FailureKind
    text: Optional[str]


def describe(exc: BaseException) -> str:
    """异常信息，信息为空时使用异常类名"""
    return str(exc) or type(exc).__name__


def classify_failure(exc: BaseException) -> FailureReply:
    """
    错误分类

    Args:
        exc: 流水线中捕获的异常

    Returns:
        FailureReply（类别 + 用户回复文本）
    """
    # 子类必须先于 DeliveryError 判断
    if isinstance(exc, DeliveryBlocked):
        return FailureReply(FailureKind.DELIVERY_BLOCKED, None)
    if isinstance(exc, DeliveryFailed):
        return FailureReply(FailureKind.DELIVERY_FAILED, DELIVERY_FAILED_TEXT)
    if isinstance(exc, DeliveryError):
        return FailureReply(FailureKind.DELIVERY_ERROR, f"An error occurred: {exc.message}")
    if isinstance(exc, NoLyricsFound):
        return FailureReply(FailureKind.NO_LYRICS, NO_LYRICS_TEXT)
    if isinstance(exc, SummarizationTimeout):
        return FailureReply(FailureKind.TIMEOUT, TIMEOUT_TEXT)
    return FailureReply(FailureKind.UNKNOWN, f"An error occurred.\nError: {describe(exc)}")
