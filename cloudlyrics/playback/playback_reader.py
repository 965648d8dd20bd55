"""Home Assistant 播放器状态读取器"""

import asyncio
import logging
from typing import Optional, Dict, Any
from urllib.parse import quote

import aiohttp

from cloudlyrics.core.errors import PlaybackReadError
from cloudlyrics.core.interfaces import IPlaybackReader, PlaybackState


class HomeAssistantPlaybackReader(IPlaybackReader):
    """
    通过 Home Assistant REST API 读取媒体播放器状态

    GET /api/states/<entity_id>，404 表示实体不存在。
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        初始化播放器状态读取器

        Args:
            base_url: Home Assistant 根地址
            token: 长期访问令牌
            timeout: 请求超时（秒）
            session: 共享的aiohttp会话（可选）
        """
        self.logger = logging.getLogger("cloudlyrics.playback.playback_reader")
        self.base_url = base_url.rstrip("/")

        self.headers: Dict[str, str] = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session

    async def read_state(self, entity_id: str) -> Optional[PlaybackState]:
        """
        读取媒体播放器状态

        Args:
            entity_id: 媒体播放器实体ID

        Returns:
            PlaybackState，实体不存在时返回None

        Raises:
            PlaybackReadError: 网络错误或非预期的响应
        """
        url = f"{self.base_url}/api/states/{quote(entity_id, safe='._')}"

        try:
            if self._session is not None:
                data = await self._request_state(self._session, url)
            else:
                async with aiohttp.ClientSession(timeout=self.timeout) as session:
                    data = await self._request_state(session, url)
        except asyncio.TimeoutError as e:
            raise PlaybackReadError(f"读取实体状态超时: {entity_id}") from e
        except aiohttp.ClientError as e:
            raise PlaybackReadError(f"读取实体状态网络错误: {e}") from e

        if data is None:
            return None

        attributes = data.get("attributes")
        return PlaybackState.from_attributes(
            str(data.get("state", "")),
            attributes if isinstance(attributes, dict) else {}
        )

    async def _request_state(self, session: aiohttp.ClientSession, url: str) -> Optional[Dict[str, Any]]:
        async with session.get(url, headers=self.headers, timeout=self.timeout) as response:
            if response.status == 404:
                return None
            if response.status != 200:
                raise PlaybackReadError(f"HTTP {response.status}", status=response.status)

            try:
                data = await response.json()
            except (aiohttp.ContentTypeError, ValueError) as e:
                raise PlaybackReadError("实体状态响应不是有效的JSON") from e

        if not isinstance(data, dict):
            raise PlaybackReadError(f"实体状态响应格式错误: {type(data).__name__}")
        return data
