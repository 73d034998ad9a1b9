"""
Genius 歌词搜索与抓取服务
"""
import httpx
from typing import Any, Dict, List, Optional
from bs4 import BeautifulSoup
from src.models.config_schema import LyricsConfig
from src.core.logger import logger
from ..models import SongResult


class GeniusClient:
    """Genius 歌词客户端"""

    def __init__(self, config: LyricsConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            config: 歌词配置
            transport: 自定义 httpx 传输层（测试时注入）
        """
        self.config = config
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=self.transport,
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
        )

    async def search(self, query: str) -> List[SongResult]:
        """
        搜索歌曲

        有 access_token 时使用官方 API，否则使用公开的搜索接口。

        Args:
            query: 原始消息文本，不做任何处理

        Returns:
            按相关度排序的歌曲列表（可能为空）

        Raises:
            httpx.HTTPError: 请求失败
        """
        if self.config.access_token:
            url = self.config.api_search_url
            headers = {"Authorization": f"Bearer {self.config.access_token}"}
            params = {"q": query, "per_page": self.config.per_page}
        else:
            url = self.config.search_url
            headers = {}
            params = {"q": query, "per_page": self.config.per_page}

        async with self._client() as client:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            data = resp.json()

        hits = self._extract_hits(data)
        results = [self._to_song(hit["result"]) for hit in hits if isinstance(hit.get("result"), dict)]
        logger.info(f"🔍 Genius 搜索 {query!r}: {len(results)} 条结果")
        return results

    @staticmethod
    def _extract_hits(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        从两种搜索响应中取出 hits

        公开接口: response.sections[*].hits（取 type 为 song 的分区）
        官方 API: response.hits（只保留 type 为 song 的结果）
        """
        response = data.get("response") or {}

        if "sections" in response:
            for section in response.get("sections") or []:
                if section.get("type") in (None, "song"):
                    return section.get("hits") or []
            return []

        return [hit for hit in response.get("hits") or [] if hit.get("type", "song") == "song"]

    @staticmethod
    def _to_song(result: Dict[str, Any]) -> SongResult:
        title = result.get("title") or ""
        artist = (result.get("primary_artist") or {}).get("name") or result.get("artist_names") or ""
        full_title = result.get("full_title") or (f"{title} by {artist}" if artist else title)
        return SongResult(
            title=title,
            full_title=full_title,
            url=result.get("url") or "",
            song_id=str(result.get("id") or ""),
            artist=artist,
        )

    async def fetch_lyrics(self, song: SongResult) -> Optional[str]:
        """
        抓取歌词页面并提取歌词文本

        Returns:
            歌词文本，页面上没有歌词时返回 None

        Raises:
            httpx.HTTPError: 请求失败
        """
        if not song.url:
            return None

        async with self._client() as client:
            resp = await client.get(song.url)
            resp.raise_for_status()
            page = resp.text

        lyrics = self.extract_lyrics(page)
        if not lyrics:
            logger.info(f"📭 没有找到歌词: {song.full_title}")
            return None

        song.lyrics_text = lyrics
        return lyrics

    @staticmethod
    def extract_lyrics(page: str) -> str:
        """
        从歌词页面 HTML 中提取歌词

        1. 找出所有 data-lyrics-container="true" 的 div
        2. 去掉 data-exclude-from-selection 的块（页头、贡献者信息等）
        3. <br> 转为换行
        """
        soup = BeautifulSoup(page, "html.parser")
        containers = soup.select('div[data-lyrics-container="true"]')
        if not containers:
            return ""

        parts = []
        for container in containers:
            for excluded in container.select('[data-exclude-from-selection="true"]'):
                excluded.decompose()
            for br in container.find_all("br"):
                br.replace_with("\n")
            text = container.get_text()
            if text.strip():
                parts.append(text.strip())

        return "\n".join(parts).strip()
