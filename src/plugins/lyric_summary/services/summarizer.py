"""
歌词总结服务
调用 OpenAI 兼容的模型生成歌词总结
"""
from typing import Optional
import httpx
from src.models.api_types import ChatMessage
from src.models.config_schema import SummarizerConfig
from src.services.http_client import AsyncHTTPClient
from src.core.logger import logger
from ..errors import SummarizationError
from ..models import SummaryResult

DEFAULT_SUFFIX = " Tl;dr"


def build_prompt(lyrics_text: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """歌词 + 固定后缀"""
    return lyrics_text + suffix


class LyricsSummarizer:
    """歌词总结器"""

    def __init__(self, config: SummarizerConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    async def summarize(self, prompt: str) -> SummaryResult:
        """
        生成总结

        这里不设置业务超时，由调用方负责。

        Args:
            prompt: 已经拼好后缀的歌词

        Returns:
            SummaryResult

        Raises:
            SummarizationError: 模型返回空内容
            httpx.HTTPError: 请求失败
        """
        cfg = self.config
        logger.info(f"🎵 开始生成歌词总结（{len(prompt)} 字符）...")

        async with AsyncHTTPClient(timeout=cfg.request_timeout, transport=self.transport) as client:
            response = await client.chat_completion(
                api_base=cfg.api_base,
                api_key=cfg.api_key,
                model=cfg.model_name,
                messages=[ChatMessage(role="user", content=prompt)],
                temperature=cfg.temperature,
                max_tokens=cfg.max_tokens,
            )

        text = AsyncHTTPClient.parse_completion_response(response)
        if not text:
            raise SummarizationError("The model returned an empty summary.")

        usage = AsyncHTTPClient.parse_usage(response)
        if usage:
            logger.debug(f"token 使用: {usage.total_tokens}")

        logger.info(f"✅ 总结生成成功，长度: {len(text)} 字符")
        return SummaryResult(text=text, usage=usage)
