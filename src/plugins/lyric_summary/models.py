"""
歌词总结数据模型
所有对象只在一次请求内存在，不做持久化
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from src.models.api_types import ChatUsage


@dataclass
class IncomingMessage:
    """一条入站文本消息"""
    chat_id: int
    user_id: int
    display_name: str
    username: str
    text: str
    message_id: int


@dataclass
class SongResult:
    """歌词供应商返回的歌曲"""
    title: str
    full_title: str
    url: str = ""
    song_id: str = ""
    artist: str = ""
    lyrics_text: Optional[str] = None


@dataclass
class SummaryResult:
    """总结结果"""
    text: str
    usage: Optional[ChatUsage] = None


class Outcome(str, Enum):
    """一次请求的终止状态"""
    REPLIED = "replied"
    NO_LYRICS = "no_lyrics"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    BLOCKED = "blocked"
    IGNORED = "ignored"
