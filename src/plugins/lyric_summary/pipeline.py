"""
歌词总结请求流水线

一条消息的完整处理流程：
    发送"Summarising"提示 -> 搜索歌曲 -> 取第一条结果的歌词
    -> 总结（与超时计时器竞速）-> 回复 -> 删除提示

每条消息只会到达一个终止状态，不重试。
"""
import asyncio
from typing import Optional, Set
from src.core.logger import logger
from .errors import (
    FailureKind,
    NoLyricsFound,
    SummarizationTimeout,
    classify_failure,
    describe,
)
from .models import IncomingMessage, Outcome, SummaryResult
from .services.summarizer import DEFAULT_SUFFIX, build_prompt

DEFAULT_TIMEOUT_MS = 60000
DEFAULT_STATUS_TEXT = "Summarising"

_OUTCOME_BY_KIND = {
    FailureKind.DELIVERY_BLOCKED: Outcome.BLOCKED,
    FailureKind.NO_LYRICS: Outcome.NO_LYRICS,
    FailureKind.TIMEOUT: Outcome.TIMED_OUT,
}


def format_summary(full_title: str, summary: str) -> str:
    return f"Summary of {full_title}\n\n{summary}"


class RequestPipeline:
    """歌词总结流水线"""

    def __init__(
        self,
        transport,
        lyrics_client,
        summarizer,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        status_text: str = DEFAULT_STATUS_TEXT,
        prompt_suffix: str = DEFAULT_SUFFIX,
    ):
        """
        Args:
            transport: MessagingTransport
            lyrics_client: 提供 search() / fetch_lyrics() 的歌词客户端
            summarizer: 提供 summarize() 的总结客户端
            timeout_ms: 总结调用的软超时（毫秒）
            status_text: 处理中的提示消息
            prompt_suffix: 追加在歌词后的提示
        """
        self.transport = transport
        self.lyrics_client = lyrics_client
        self.summarizer = summarizer
        self.timeout_ms = timeout_ms
        self.status_text = status_text
        self.prompt_suffix = prompt_suffix
        # 超时后被放弃的总结任务，保留引用直到它们自行结束
        self._abandoned: Set[asyncio.Task] = set()

    async def handle(self, message: IncomingMessage) -> Outcome:
        """
        处理一条消息

        所有异常都在这里被捕获并转换为用户回复，不会向外抛出。

        Returns:
            终止状态
        """
        if not message.text or not message.text.strip():
            logger.debug(f"忽略空消息: chat {message.chat_id}")
            return Outcome.IGNORED

        status_id: Optional[int] = None
        try:
            status_id = await self.transport.send_message(message.chat_id, self.status_text)
            outcome = await self._run(message)
        except Exception as e:
            outcome = await self._handle_failure(message, e)

        if status_id is not None:
            await self._discard_status(message.chat_id, status_id)
        return outcome

    async def _run(self, message: IncomingMessage) -> Outcome:
        songs = await self.lyrics_client.search(message.text)
        if not songs:
            raise NoLyricsFound(message.text)

        song = songs[0]
        lyrics = await self.lyrics_client.fetch_lyrics(song)
        if not lyrics:
            raise NoLyricsFound(song.full_title)

        prompt = build_prompt(lyrics, self.prompt_suffix)
        result = await self._summarize_with_timeout(prompt)

        await self.transport.send_message(message.chat_id, format_summary(song.full_title, result.text))
        logger.info(f"✅ 已回复 chat {message.chat_id}: {song.full_title}")
        return Outcome.REPLIED

    async def _summarize_with_timeout(self, prompt: str) -> SummaryResult:
        """
        总结调用与计时器竞速

        计时器先到时不取消总结任务，只是放弃它；
        任务之后的结果或异常会被读取并丢弃。

        Raises:
            SummarizationTimeout: 计时器先到
        """
        task = asyncio.ensure_future(self.summarizer.summarize(prompt))
        done, _ = await asyncio.wait({task}, timeout=self.timeout_ms / 1000)
        if task in done:
            return task.result()

        self._abandon(task)
        raise SummarizationTimeout(self.timeout_ms)

    def _abandon(self, task: asyncio.Task) -> None:
        self._abandoned.add(task)
        task.add_done_callback(self._drain)

    def _drain(self, task: asyncio.Task) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug(f"已放弃的总结任务以异常结束: {describe(exc)}")
        else:
            logger.debug("已放弃的总结任务结束，结果被丢弃")

    async def _handle_failure(self, message: IncomingMessage, exc: Exception) -> Outcome:
        """按错误类别记录日志并回复用户"""
        failure = classify_failure(exc)

        if failure.kind == FailureKind.DELIVERY_BLOCKED:
            logger.info(f"🚫 Bot was blocked by the user (chat {message.chat_id}): {describe(exc)}")
        elif failure.kind in (FailureKind.DELIVERY_FAILED, FailureKind.DELIVERY_ERROR):
            logger.error(f"❌ Error sending message (chat {message.chat_id}): {describe(exc)}", exc_info=exc)
        elif failure.kind == FailureKind.UNKNOWN:
            logger.error(f"❌ An error occurred (chat {message.chat_id}): {describe(exc)}", exc_info=exc)
        else:
            logger.info(f"ℹ️ chat {message.chat_id}: {failure.kind.value}")

        if failure.text is not None:
            try:
                await self.transport.send_message(message.chat_id, failure.text, reply_to=message.message_id)
            except Exception as e:
                logger.error(f"❌ 发送错误回复失败 (chat {message.chat_id}): {describe(e)}")

        return _OUTCOME_BY_KIND.get(failure.kind, Outcome.FAILED)

    async def _discard_status(self, chat_id: int, status_id: int) -> None:
        """删除提示消息，失败只记录日志"""
        try:
            await self.transport.delete_message(chat_id, status_id)
        except Exception as e:
            logger.warning(f"⚠️ 删除提示消息失败（可忽略）: {describe(e)}")
