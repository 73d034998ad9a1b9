"""
OpenAI 兼容接口的 HTTP 客户端
"""
import re
import httpx
from typing import Any, Dict, List, Optional
from src.core.logger import logger
from src.models.api_types import ChatMessage, ChatRequest, ChatUsage

_THINK_BLOCK = re.compile(r"<think>.*?</think>", flags=re.DOTALL)


class AsyncHTTPClient:
    """
    httpx.AsyncClient 的轻量封装

    必须在 async with 中使用，退出时关闭连接池。
    """

    def __init__(self, timeout: Optional[float] = 30, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            timeout: 单次请求超时（秒），None 为不限制
            transport: 可替换的 httpx 传输层，测试用
        """
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def post_json(self, url: str, payload: Dict[str, Any], api_key: str = "") -> Dict[str, Any]:
        """
        POST 一个 JSON 请求体并返回解析后的 JSON

        Raises:
            RuntimeError: 没有在 async with 中使用
            httpx.TimeoutException / httpx.HTTPStatusError / httpx.RequestError
        """
        if self.client is None:
            raise RuntimeError("AsyncHTTPClient 需要在 'async with' 中使用")

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        try:
            resp = await self.client.post(url, json=payload, headers=headers)
            resp.raise_for_status()
        except httpx.TimeoutException:
            logger.error(f"⏱️ 请求超过 {self.timeout} 秒未返回: {url}")
            raise
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ {url} 返回 HTTP {e.response.status_code}: {e.response.text[:200]}")
            raise
        except httpx.RequestError as e:
            logger.error(f"❌ 无法连接 {url}: {type(e).__name__}: {e}")
            raise

        return resp.json()

    async def chat_completion(
        self,
        api_base: str,
        api_key: str,
        model: str,
        messages: List[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> Dict[str, Any]:
        """
        调用 {api_base}/chat/completions

        Args:
            api_base: 接口根地址，例如 https://api.openai.com/v1
            api_key: 密钥，为空时不发送 Authorization 头
            model: 模型标识符
            messages: 对话消息
            temperature: 采样温度
            max_tokens: 回复长度上限

        Returns:
            原始 JSON 响应
        """
        url = api_base.rstrip("/") + "/chat/completions"
        request = ChatRequest(model=model, messages=messages, temperature=temperature, max_tokens=max_tokens)
        logger.debug(f"→ {url} model={model} messages={len(messages)}")
        return await self.post_json(url, request.dict(), api_key=api_key)

    @staticmethod
    def parse_completion_response(response: Dict[str, Any]) -> str:
        """
        取出第一个 choice 的文本

        兼容 chat 格式（message.content）和旧的 completion 格式（text），
        并去掉推理模型输出的 <think> 块。解析不出内容时返回空字符串。
        """
        choices = response.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            logger.error(f"响应中没有可用的 choices: {response}")
            return ""

        choice = choices[0]
        message = choice.get("message")
        if isinstance(message, dict):
            content = message.get("content") or ""
        else:
            content = choice.get("text") or ""

        return _THINK_BLOCK.sub("", content).strip()

    @staticmethod
    def parse_usage(response: Dict[str, Any]) -> Optional[ChatUsage]:
        """读取 usage 字段，不存在时返回 None"""
        usage = response.get("usage")
        if not isinstance(usage, dict):
            return None
        return ChatUsage(
            prompt_tokens=usage.get("prompt_tokens") or 0,
            completion_tokens=usage.get("completion_tokens") or 0,
            total_tokens=usage.get("total_tokens") or 0,
        )
