"""
歌词嵌入消息构建器

将歌词视图转换为 Discord 嵌入消息：
- 歌曲标题、歌手和封面
- 当前行附近的歌词窗口（含翻译）
- 加载中、暂无歌词、获取失败等状态消息
"""

import discord
from typing import Optional, List

from cloudlyrics.core.interfaces import DisplayLine, DisplayStatus, LyricsView, PlaybackState
from cloudlyrics.lyrics.lyrics_parser import format_time
from cloudlyrics.utils.config_manager import LyricsCardConfig


class LyricsEmbedBuilder:
    """
    歌词嵌入消息构建器

    只读取 LyricsView，不持有同步状态。
    """

    # 主题色彩
    COLORS = {
        'lyrics': discord.Color.blue(),
        'error': discord.Color.red(),
        'info': discord.Color.blue(),
        'neutral': discord.Color.light_grey()
    }

    STATUS_MESSAGES = {
        DisplayStatus.IDLE: ('neutral', "等待播放..."),
        DisplayStatus.LOADING: ('info', "⏳ 正在加载歌词..."),
        DisplayStatus.NO_LYRICS: ('neutral', "暂无歌词"),
        DisplayStatus.FETCH_FAILED: ('error', "❌ 获取歌词失败"),
    }

    def __init__(self, config: LyricsCardConfig, window_lines: int = 2, base_url: Optional[str] = None):
        """
        初始化构建器

        Args:
            config: 歌词卡片配置
            window_lines: 当前行前后显示的行数
            base_url: Home Assistant 根地址，用于补全相对封面地址
        """
        self.config = config
        self.window_lines = max(0, window_lines)
        self.base_url = base_url.rstrip('/') if base_url else None

    def build(self, view: LyricsView) -> discord.Embed:
        """
        构建歌词视图对应的嵌入消息

        Args:
            view: 歌词视图

        Returns:
            Discord嵌入消息
        """
        if view.status == DisplayStatus.ENTITY_NOT_FOUND:
            return discord.Embed(
                description=f"实体不存在: {self.config.entity}",
                color=self.COLORS['error']
            )

        if view.status == DisplayStatus.READY:
            embed = discord.Embed(
                description=self.format_lyrics_window(view.lines, view.active_index),
                color=self.COLORS['lyrics']
            )
        else:
            color_key, message = self.STATUS_MESSAGES.get(view.status, ('neutral', "暂无歌词"))
            if view.status == DisplayStatus.FETCH_FAILED and view.error:
                message = f"{message}\n{discord.utils.escape_markdown(view.error)}"
            embed = discord.Embed(description=message, color=self.COLORS[color_key])

        if self.config.show_header and view.playback is not None:
            self._add_header(embed, view.playback)

        footer = f"同步偏移 {view.offset_ms:+d}ms"
        if view.status == DisplayStatus.READY and view.position is not None:
            footer = f"{format_time(view.position)} · {footer}"
        embed.set_footer(text=footer)
        return embed

    def format_lyrics_window(self, lines: List[DisplayLine], active_index: int) -> str:
        """
        格式化当前行附近的歌词

        Args:
            lines: 显示行列表
            active_index: 当前行索引（-1 表示尚未开始）

        Returns:
            格式化的歌词文本
        """
        if not lines:
            return "暂无歌词"

        center = max(active_index, 0)
        start = max(0, center - self.window_lines)
        end = min(len(lines), center + self.window_lines + 1)

        parts = []
        for line in lines[start:end]:
            text = discord.utils.escape_markdown(line.text)
            parts.append(f"**▶ {text}**" if line.is_current else text)
            if line.translation:
                parts.append(f"*{discord.utils.escape_markdown(line.translation)}*")

        return "\n".join(parts)

    def _add_header(self, embed: discord.Embed, playback: PlaybackState) -> None:
        title = playback.media_title or "未知歌曲"
        artist = playback.media_artist or "未知歌手"
        embed.title = f"🎵 {title}"
        embed.set_author(name=artist)

        cover_url = self._absolute_url(playback.cover_url)
        if self.config.show_cover and cover_url:
            embed.set_thumbnail(url=cover_url)

    def _absolute_url(self, url: Optional[str]) -> Optional[str]:
        if not url:
            return None
        if url.startswith('/'):
            return f"{self.base_url}{url}" if self.base_url else None
        return url
