"""
歌词总结消息处理器
非命令的文本消息都会进入流水线
"""
from telegram import Update
from telegram.ext import ContextTypes
from src.core.logger import logger
from .pipeline import RequestPipeline
from .transport import incoming_from_update

PIPELINE_KEY = "lyric_summary.pipeline"


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """把一条文本消息交给流水线"""
    message = incoming_from_update(update)
    if message is None:
        return

    pipeline: RequestPipeline = context.bot_data[PIPELINE_KEY]
    outcome = await pipeline.handle(message)
    logger.debug(f"chat {message.chat_id} 处理结束: {outcome.value}")
