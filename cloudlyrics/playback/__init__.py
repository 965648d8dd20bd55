"""
播放模块 - 读取播放器状态并驱动歌词显示

包含 Home Assistant 播放器状态读取器和基于 asyncio 的显示服务。
"""

from .playback_reader import HomeAssistantPlaybackReader
from .display_service import LyricsDisplayService

__all__ = [
    "HomeAssistantPlaybackReader",
    "LyricsDisplayService"
]
