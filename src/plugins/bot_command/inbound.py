"""
入站消息钩子
在所有处理器之前运行：记录日志，并把普通用户的消息转发给管理员
"""
from telegram import Update
from telegram.ext import ContextTypes
from src.core.logger import logger
from src.core.security import AdminFilter
from src.plugins.lyric_summary.transport import TelegramTransport, incoming_from_update

ADMIN_FILTER_KEY = "bot_command.admin_filter"


async def on_inbound(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """记录入站消息并按需转发给管理员（不等待转发完成）"""
    message = incoming_from_update(update)
    if message is None:
        return

    logger.info(
        f"From: {message.display_name} (@{message.username}) ID: {message.user_id}\n"
        f"Message: {message.text}"
    )

    admin_filter: AdminFilter = context.bot_data[ADMIN_FILTER_KEY]
    access = admin_filter.annotate(message.chat_id)
    if access.is_admin:
        logger.debug(f"管理员消息: chat {message.chat_id}")

    if admin_filter.should_mirror(message.chat_id, message.text):
        transport = TelegramTransport(context.bot)
        context.application.create_task(
            admin_filter.mirror(transport, message),
            update=update,
            name=f"mirror:{message.chat_id}:{message.message_id}",
        )
