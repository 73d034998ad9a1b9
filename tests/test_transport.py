"""Unit tests for the Telegram transport."""
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from telegram import Chat, Message, Update, User
from telegram.error import BadRequest, Forbidden, NetworkError

from src.plugins.lyric_summary.errors import DeliveryBlocked, DeliveryError, DeliveryFailed
from src.plugins.lyric_summary.transport import (
    TelegramTransport,
    display_name,
    incoming_from_update,
    to_delivery_error,
)


def make_update(text="Bohemian Rhapsody", user=True):
    from_user = User(id=7, first_name="Freddie", is_bot=False, last_name="Mercury", username="freddie") if user else None
    message = Message(
        message_id=555,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        chat=Chat(id=42, type="private", username="queen_fan"),
        from_user=from_user,
        text=text,
    )
    return Update(update_id=1, message=message)


class TestToDeliveryError:
    def test_forbidden_is_blocked(self):
        error = to_delivery_error("sendMessage", Forbidden("bot was blocked by the user"))

        assert isinstance(error, DeliveryBlocked)
        assert error.method == "sendMessage"
        assert error.message == "bot was blocked by the user"

    def test_send_failure(self):
        error = to_delivery_error("sendMessage", BadRequest("chat not found"))

        assert type(error) is DeliveryFailed

    def test_other_method(self):
        error = to_delivery_error("deleteMessage", NetworkError("connection reset"))

        assert type(error) is DeliveryError
        assert error.method == "deleteMessage"


class TestTelegramTransport:
    @pytest.mark.asyncio
    async def test_send_returns_message_id(self):
        bot = AsyncMock()
        bot.send_message.return_value = Mock(message_id=77)
        transport = TelegramTransport(bot)

        message_id = await transport.send_message(42, "Summarising", reply_to=555, disable_preview=True)

        assert message_id == 77
        kwargs = bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 42
        assert kwargs["text"] == "Summarising"
        assert kwargs["reply_parameters"].message_id == 555
        assert kwargs["reply_parameters"].allow_sending_without_reply is True
        assert kwargs["link_preview_options"].is_disabled is True

    @pytest.mark.asyncio
    async def test_send_without_reply(self):
        bot = AsyncMock()
        bot.send_message.return_value = Mock(message_id=1)

        await TelegramTransport(bot).send_message(42, "hi")

        kwargs = bot.send_message.call_args.kwargs
        assert kwargs["reply_parameters"] is None
        assert kwargs["link_preview_options"] is None
        assert kwargs["parse_mode"] is None

    @pytest.mark.asyncio
    async def test_send_failure_is_converted(self):
        bot = AsyncMock()
        bot.send_message.side_effect = Forbidden("bot was blocked by the user")

        with pytest.raises(DeliveryBlocked):
            await TelegramTransport(bot).send_message(42, "hi")

    @pytest.mark.asyncio
    async def test_delete_failure_is_converted(self):
        bot = AsyncMock()
        bot.delete_message.side_effect = BadRequest("message to delete not found")

        with pytest.raises(DeliveryError) as excinfo:
            await TelegramTransport(bot).delete_message(42, 1001)

        assert excinfo.value.method == "deleteMessage"

    @pytest.mark.asyncio
    async def test_forward(self):
        bot = AsyncMock()

        await TelegramTransport(bot).forward_message(100, 42, 555)

        bot.forward_message.assert_awaited_once_with(chat_id=100, from_chat_id=42, message_id=555)


class TestIncomingFromUpdate:
    def test_text_message(self):
        message = incoming_from_update(make_update())

        assert message.chat_id == 42
        assert message.user_id == 7
        assert message.display_name == "Freddie Mercury"
        assert message.username == "freddie"
        assert message.text == "Bohemian Rhapsody"
        assert message.message_id == 555

    def test_non_text_message(self):
        assert incoming_from_update(make_update(text=None)) is None

    def test_edited_message(self):
        original = make_update().message
        edited = Message(
            message_id=original.message_id,
            date=original.date,
            chat=original.chat,
            from_user=original.from_user,
            text="Bohemian Rhapsody (Live)",
            edit_date=datetime(2024, 1, 1, 0, 5, tzinfo=timezone.utc),
        )

        assert incoming_from_update(Update(update_id=2, edited_message=edited)) is None

    def test_without_sender_uses_chat(self):
        message = incoming_from_update(make_update(user=False))

        assert message.user_id == 42
        assert message.username == "queen_fan"


@pytest.mark.parametrize("first, last, expected", [("Freddie", "Mercury", "Freddie Mercury"), ("Freddie", None, "Freddie"), (None, None, "")])
def test_display_name(first, last, expected):
    assert display_name(first, last) == expected
