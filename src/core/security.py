"""
权限控制模块
区分管理员与普通用户，并把普通用户的消息转发给管理员
"""
import html
from dataclasses import dataclass
from typing import List
from src.models.config_schema import AdminConfig
from src.core.logger import logger


@dataclass
class AccessContext:
    """一次事件的权限标记"""
    bot_admins: List[int]
    is_admin: bool


def is_command(text: str) -> bool:
    """消息是否为命令（以 / 开头）"""
    return text.strip().startswith("/")


class AdminFilter:
    """
    管理员过滤器

    管理员列表在构造时由配置传入，运行期间不会修改。
    """

    def __init__(self, config: AdminConfig):
        self.config = config
        self._admins = frozenset(config.admin_ids)

    def is_admin(self, chat_id: int) -> bool:
        return chat_id in self._admins

    def annotate(self, chat_id: int) -> AccessContext:
        """为事件打上管理员标记"""
        return AccessContext(bot_admins=list(self.config.admin_ids), is_admin=self.is_admin(chat_id))

    def should_mirror(self, chat_id: int, text: str) -> bool:
        """
        是否需要把这条消息转发给管理员

        条件：开启转发、存在收件箱、不是命令、发送方不是管理员
        """
        if not self.config.mirror_messages or self.config.inbox() is None:
            return False
        if is_command(text):
            return False
        return not self.is_admin(chat_id)

    async def mirror(self, transport, message) -> bool:
        """
        把消息转发给管理员收件箱：先发一条 HTML 头，再转发原消息

        失败只记录日志，不影响后续流程。

        Returns:
            是否转发成功
        """
        inbox = self.config.inbox()
        if inbox is None:
            return False

        header = (
            f"<b>From: {html.escape(message.display_name)} (@{html.escape(message.username)}) "
            f"ID: <code>{message.user_id}</code></b>"
        )
        try:
            await transport.send_message(inbox, header, parse_mode="HTML")
            await transport.forward_message(inbox, message.chat_id, message.message_id)
            return True
        except Exception as e:
            logger.warning(f"⚠️ 转发消息给管理员失败（可忽略）: {e}")
            return False
