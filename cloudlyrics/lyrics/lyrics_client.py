"""云音乐歌词API客户端 - 歌词获取功能"""

import asyncio
import json
import logging
from typing import Optional, Dict, Any
from urllib.parse import quote

import aiohttp

from cloudlyrics.core.errors import LyricsFetchError
from cloudlyrics.core.interfaces import ILyricsFetcher, LyricsPayload


class CloudMusicLyricsClient(ILyricsFetcher):
    """
    云音乐歌词API客户端

    通过 Home Assistant cloud_music 集成提供的接口按歌曲ID获取歌词。
    所有传输层错误统一转换为 LyricsFetchError，由调用方决定如何展示。
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        初始化歌词客户端

        Args:
            base_url: 歌词接口所在服务的根地址
            token: 访问令牌（可选，作为Bearer令牌发送）
            timeout: 请求超时（秒）
            session: 共享的aiohttp会话（可选）
        """
        self.logger = logging.getLogger("cloudlyrics.lyrics.lyrics_client")

        self.base_url = base_url.rstrip("/")
        self.lyrics_api = f"{self.base_url}/cloud_music/api"

        self.headers: Dict[str, str] = {}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

        self.logger.debug(f"歌词客户端初始化完成 - 接口: {self.lyrics_api}")

    async def fetch_lyrics(self, song_id: str) -> LyricsPayload:
        """
        获取歌曲歌词

        Args:
            song_id: 歌曲ID

        Returns:
            LyricsPayload，歌词缺失时对应字段为None

        Raises:
            LyricsFetchError: 非2xx响应、网络错误或响应体无法解析
        """
        url = f"{self.lyrics_api}?action=lyric&id={quote(str(song_id), safe='')}"
        self.logger.debug(f"获取歌曲ID的歌词: {song_id}")

        try:
            if self._session is not None:
                data = await self._request_json(self._session, url)
            else:
                async with aiohttp.ClientSession(timeout=self.timeout) as session:
                    data = await self._request_json(session, url)
        except asyncio.TimeoutError as e:
            self.logger.warning(f"获取歌曲ID歌词超时: {song_id}")
            raise LyricsFetchError(f"获取歌词超时: {song_id}") from e
        except aiohttp.ClientError as e:
            self.logger.warning(f"获取歌曲ID '{song_id}' 歌词时网络错误: {e}")
            raise LyricsFetchError(f"网络错误: {e}") from e

        payload = LyricsPayload(
            lrc=self._extract_lyric(data.get("lrc")),
            tlyric=self._extract_lyric(data.get("tlyric"))
        )

        self.logger.info(f"成功获取歌曲ID的歌词: {song_id} (翻译: {'有' if payload.tlyric else '无'})")
        return payload

    async def _request_json(self, session: aiohttp.ClientSession, url: str) -> Dict[str, Any]:
        async with session.get(url, headers=self.headers, timeout=self.timeout) as response:
            if not 200 <= response.status < 300:
                self.logger.warning(f"歌词API返回状态 {response.status}")
                raise LyricsFetchError(f"HTTP {response.status}", status=response.status)

            text_response = await response.text()

        try:
            data = json.loads(text_response)
        except json.JSONDecodeError as e:
            self.logger.warning(f"歌词响应不是有效的JSON: {e}")
            self.logger.debug(f"歌词响应内容（前300字符）: {text_response[:300]}...")
            raise LyricsFetchError("歌词响应不是有效的JSON") from e

        if not isinstance(data, dict):
            raise LyricsFetchError(f"歌词响应格式错误: {type(data).__name__}")

        return data

    @staticmethod
    def _extract_lyric(value: Any) -> Optional[str]:
        """
        提取歌词文本

        接口可能直接返回字符串，也可能返回网易云原始格式 {"lyric": "..."}。
        """
        if isinstance(value, dict):
            value = value.get("lyric")
        if isinstance(value, str) and value.strip():
            return value
        return None
