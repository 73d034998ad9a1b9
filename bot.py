"""
Lyric Summary Bot 启动入口文件
"""
import sys
import logging
from pathlib import Path
from dotenv import load_dotenv

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# 加载 .env 文件
load_dotenv(project_root / ".env")

from telegram import Update
from telegram.error import Conflict, NetworkError, RetryAfter, TimedOut
from telegram.ext import Application, ContextTypes
from src.core.config_manager import ConfigManager
from src.core.logger import NoiseFilter, resolve_level, setup_logger
from src.core.sequencer import SequentialUpdateProcessor, make_session_key
from src.models.config_schema import FullConfig
from src.plugins import bot_command, lyric_summary

# 初始化日志
logger = setup_logger(__name__, resolve_level())

# httpx 会在 INFO 级别记录每一次 getUpdates 轮询
logging.getLogger("httpx").addFilter(NoiseFilter())


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """处理器之外的异常（处理器内部已经捕获了已知错误）"""
    err = context.error
    session = make_session_key(update) or "unknown"

    if isinstance(err, RetryAfter):
        logger.warning(f"[{session}] Telegram 限流: {err.retry_after} 秒后重试")
        return
    if isinstance(err, Conflict):
        logger.warning(f"[{session}] 另一个实例正在使用 getUpdates，请只保留一个 Bot 进程")
        return
    if isinstance(err, (TimedOut, NetworkError)):
        logger.warning(f"[{session}] Telegram 网络异常: {err}")
        return

    logger.error(f"[{session}] ❌ 未处理的异常: {err}", exc_info=err)


def build_application(config: FullConfig) -> Application:
    """创建 Telegram Application 并加载插件"""
    application = (
        Application.builder()
        .token(config.telegram.token)
        .concurrent_updates(SequentialUpdateProcessor(config.telegram.max_concurrent_updates))
        .build()
    )

    bot_command.setup(application, config)
    lyric_summary.setup(application, config)
    application.add_error_handler(on_error)
    return application


def main() -> None:
    try:
        config = ConfigManager.load()
    except Exception as e:
        logger.error(f"❌ 配置加载失败: {e}")
        raise

    if not config.telegram.token:
        logger.critical("❌ 缺少 BOT_TOKEN，无法启动")
        sys.exit(1)
    if not config.summarizer.api_key:
        logger.warning("⚠️ 未设置 API_KEY，总结请求将会失败")
    if not config.admin.admin_ids:
        logger.warning("⚠️ 未设置 BOT_ADMIN，消息不会转发给管理员")

    application = build_application(config)
    logger.info("✅ Bot 启动中...")
    application.run_polling(
        allowed_updates=Update.ALL_TYPES,
        drop_pending_updates=config.telegram.drop_pending_updates,
    )


if __name__ == "__main__":
    main()
