"""
会话串行化
同一会话的更新按到达顺序逐个处理，不同会话之间并发
"""
import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Dict, Optional
from telegram import Update
from telegram.ext import BaseUpdateProcessor
from src.core.logger import logger


def make_session_key(update: object) -> Optional[str]:
    """生成会话唯一标识（chat id）"""
    if isinstance(update, Update) and update.effective_chat is not None:
        return str(update.effective_chat.id)
    return None


class ChatSequencer:
    """
    按会话加锁

    asyncio.Lock 按 acquire 的先后唤醒等待者，因此同一个 key 下的
    协程严格按进入 hold() 的顺序执行。
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._pending: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: Optional[str]):
        if key is None:
            yield
            return

        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._pending[key] = self._pending.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._pending[key] -= 1
            if self._pending[key] == 0:
                del self._pending[key]
                del self._locks[key]


class SequentialUpdateProcessor(BaseUpdateProcessor):
    """按会话串行处理更新，并记录每个更新的响应时间"""

    def __init__(self, max_concurrent_updates: int = 256):
        super().__init__(max_concurrent_updates)
        self.sequencer = ChatSequencer()

    async def process_update(self, update: object, coroutine: Awaitable[Any]) -> None:  # type: ignore[misc]
        """
        先按会话排队，轮到自己时才占用全局并发名额

        在会话锁上等待的更新不占并发名额。
        """
        async with self.sequencer.hold(make_session_key(update)):
            async with self._semaphore:
                await self.do_process_update(update, coroutine)

    async def do_process_update(self, update: object, coroutine: Awaitable[Any]) -> None:
        before = time.perf_counter()
        try:
            await coroutine
        finally:
            elapsed = (time.perf_counter() - before) * 1000
            logger.info(f"Response time: {elapsed:.0f} ms")

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass
