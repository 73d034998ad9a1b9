"""
歌词总结服务模块
"""
from .lyrics_client import GeniusClient
from .summarizer import LyricsSummarizer, build_prompt

__all__ = ["GeniusClient", "LyricsSummarizer", "build_prompt"]
