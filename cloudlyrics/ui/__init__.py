"""
界面模块 - 歌词视图的渲染

提供 Discord 嵌入消息构建器和渲染器实现。
"""

from .lyrics_embed import LyricsEmbedBuilder
from .renderers import LoggingRenderer, DiscordWebhookRenderer

__all__ = [
    "LyricsEmbedBuilder",
    "LoggingRenderer",
    "DiscordWebhookRenderer"
]
