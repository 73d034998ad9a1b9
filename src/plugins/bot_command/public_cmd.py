"""
公共命令处理器
提供 /start、/help、/cmd
"""
from telegram import Update
from telegram.ext import ContextTypes
from src.core.logger import logger
from src.plugins.lyric_summary.errors import DeliveryError
from src.plugins.lyric_summary.transport import TelegramTransport

PARSE_MODE_KEY = "bot_command.parse_mode"

START_TEXT = "*Welcome!* ✨\n_Send a song name to get the summary._"

HELP_TEXT = (
    "*@anzubo Project.*\n\n"
    "_This bot uses GPT to summarize song lyrics.\n"
    "All songs that have lyrics on Genius.com are supported._"
)

CMD_TEXT = (
    "*Commands*\n\n"
    "/start - Start the bot\n"
    "/help - About this bot\n"
    "/cmd - List commands\n\n"
    "_Send a song name to get the summary._"
)


async def _reply(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str, disable_preview: bool = False) -> bool:
    """发送命令回复，失败只记录日志"""
    transport = TelegramTransport(context.bot)
    parse_mode = context.bot_data.get(PARSE_MODE_KEY, "Markdown")
    try:
        await transport.send_message(
            update.effective_chat.id,
            text,
            parse_mode=parse_mode,
            disable_preview=disable_preview,
        )
        return True
    except DeliveryError as e:
        logger.warning(f"⚠️ 命令回复发送失败 ({e.method}): {e.message}")
        return False


# ============ /start 命令 ============
async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """欢迎信息"""
    if await _reply(update, context, START_TEXT):
        user = update.effective_user
        logger.info(f"New user added: {user.to_dict() if user else update.effective_chat.id}")


# ============ /help 命令 ============
async def handle_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """显示帮助信息"""
    if await _reply(update, context, HELP_TEXT, disable_preview=True):
        logger.info(f"Help command sent to {update.effective_chat.id}")


# ============ /cmd 命令 ============
async def handle_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """显示命令列表"""
    if await _reply(update, context, CMD_TEXT):
        logger.info(f"Command list sent to {update.effective_chat.id}")
