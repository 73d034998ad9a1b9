"""
Telegram 消息收发封装
把 python-telegram-bot 的异常转换为结构化的 DeliveryError
"""
from typing import Optional, Protocol
from telegram import Bot, LinkPreviewOptions, ReplyParameters, Update
from telegram.error import Forbidden, TelegramError
from src.core.logger import logger
from .errors import DeliveryBlocked, DeliveryError, DeliveryFailed
from .models import IncomingMessage


class MessagingTransport(Protocol):
    """流水线使用的消息接口"""

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        reply_to: Optional[int] = None,
        parse_mode: Optional[str] = None,
        disable_preview: bool = False,
    ) -> int:
        ...

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        ...

    async def forward_message(self, dest_chat_id: int, src_chat_id: int, message_id: int) -> None:
        ...


def to_delivery_error(method: str, exc: TelegramError) -> DeliveryError:
    """
    把 Telegram 异常转换为 DeliveryError

    - Forbidden（用户屏蔽了 Bot 等）-> DeliveryBlocked
    - sendMessage 的其他失败 -> DeliveryFailed
    - 其他方法的失败 -> DeliveryError
    """
    message = exc.message or type(exc).__name__
    if isinstance(exc, Forbidden):
        return DeliveryBlocked(method, message)
    if method == "sendMessage":
        return DeliveryFailed(method, message)
    return DeliveryError(method, message)


class TelegramTransport:
    """基于 telegram.Bot 的 MessagingTransport 实现"""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_message(
        self,
        chat_id: int,
        text: str,
        *,
        reply_to: Optional[int] = None,
        parse_mode: Optional[str] = None,
        disable_preview: bool = False,
    ) -> int:
        """发送消息，返回新消息的 message_id"""
        reply_parameters = None
        if reply_to is not None:
            reply_parameters = ReplyParameters(message_id=reply_to, allow_sending_without_reply=True)

        try:
            sent = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode=parse_mode,
                reply_parameters=reply_parameters,
                link_preview_options=LinkPreviewOptions(is_disabled=True) if disable_preview else None,
            )
        except TelegramError as e:
            raise to_delivery_error("sendMessage", e) from e
        return sent.message_id

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as e:
            raise to_delivery_error("deleteMessage", e) from e

    async def forward_message(self, dest_chat_id: int, src_chat_id: int, message_id: int) -> None:
        try:
            await self.bot.forward_message(
                chat_id=dest_chat_id,
                from_chat_id=src_chat_id,
                message_id=message_id,
            )
        except TelegramError as e:
            raise to_delivery_error("forwardMessage", e) from e


def display_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """拼接用户显示名"""
    if not last_name:
        return first_name or ""
    return f"{first_name} {last_name}"


def incoming_from_update(update: Update) -> Optional[IncomingMessage]:
    """
    把 Update 转换为 IncomingMessage

    只接受新消息（update.message），编辑消息和频道消息返回 None

    Returns:
        没有文本消息或者没有会话时返回 None
    """
    message = update.message
    chat = update.effective_chat
    if message is None or chat is None or message.text is None:
        return None

    user = update.effective_user
    if user is None:
        logger.debug(f"消息没有发送者信息，使用会话 {chat.id} 代替")

    return IncomingMessage(
        chat_id=chat.id,
        user_id=user.id if user else chat.id,
        display_name=display_name(user.first_name, user.last_name) if user else (chat.title or ""),
        username=(user.username if user else chat.username) or "",
        text=message.text,
        message_id=message.message_id,
    )
