"""
Bot 命令插件
提供公共命令、入站日志和管理员转发
"""
from telegram import Update
from telegram.ext import Application, CommandHandler, TypeHandler, filters
from src.core.security import AdminFilter
from src.models.config_schema import FullConfig
from .inbound import ADMIN_FILTER_KEY, on_inbound
from .public_cmd import PARSE_MODE_KEY, handle_cmd, handle_help, handle_start

__all__ = [
    "handle_start",
    "handle_help",
    "handle_cmd",
    "on_inbound",
    "setup",
]


def setup(application: Application, config: FullConfig) -> None:
    """注册插件"""
    application.bot_data[ADMIN_FILTER_KEY] = AdminFilter(config.admin)
    application.bot_data[PARSE_MODE_KEY] = config.telegram.parse_mode

    # group -1 先于其他处理器运行，且不会阻止后续分组
    application.add_handler(TypeHandler(Update, on_inbound), group=-1)
    application.add_handler(CommandHandler("start", handle_start, filters=filters.UpdateType.MESSAGE))
    application.add_handler(CommandHandler("help", handle_help, filters=filters.UpdateType.MESSAGE))
    application.add_handler(CommandHandler("cmd", handle_cmd, filters=filters.UpdateType.MESSAGE))
