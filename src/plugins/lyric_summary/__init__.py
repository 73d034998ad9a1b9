"""
歌词总结插件
发送歌名，返回 Genius 歌词的 GPT 总结
"""
from telegram.ext import Application, MessageHandler, filters
from src.models.config_schema import FullConfig
from .handlers import PIPELINE_KEY, handle_text
from .pipeline import RequestPipeline
from .services import GeniusClient, LyricsSummarizer
from .transport import TelegramTransport

__plugin_name__ = "lyric_summary"
__plugin_usage__ = """
歌词总结插件

直接发送歌名即可，例如：
Bohemian Rhapsody
"""


def build_pipeline(transport, config: FullConfig) -> RequestPipeline:
    """按配置组装流水线"""
    return RequestPipeline(
        transport=transport,
        lyrics_client=GeniusClient(config.lyrics),
        summarizer=LyricsSummarizer(config.summarizer),
        timeout_ms=config.pipeline.summary_timeout_ms,
        status_text=config.pipeline.status_text,
        prompt_suffix=config.summarizer.prompt_suffix,
    )


def setup(application: Application, config: FullConfig) -> None:
    """注册插件"""
    transport = TelegramTransport(application.bot)
    application.bot_data[PIPELINE_KEY] = build_pipeline(transport, config)
    # 只处理新消息，编辑过的消息不会再次触发
    application.add_handler(
        MessageHandler(filters.UpdateType.MESSAGE & filters.TEXT & ~filters.COMMAND, handle_text)
    )
