"""歌词渲染器 - 日志输出和 Discord Webhook 消息"""

import asyncio
import logging
import time
from typing import Callable, Optional, Tuple

import aiohttp
import discord

from cloudlyrics.core.interfaces import DisplayStatus, IDisplayRenderer, LyricsView
from .lyrics_embed import LyricsEmbedBuilder


class LoggingRenderer(IDisplayRenderer):
    """将当前歌词行写入日志"""

    def __init__(self):
        self.logger = logging.getLogger("cloudlyrics.ui.renderers")
        self._last: Optional[Tuple[DisplayStatus, int]] = None

    async def render(self, view: LyricsView) -> None:
        key = (view.status, view.active_index)
        if key == self._last:
            return
        self._last = key

        if view.status != DisplayStatus.READY:
            self.logger.info(f"[{view.status.value}]")
            return

        line = view.current_line
        if line is None:
            return

        if line.translation:
            self.logger.info(f"♪ {line.text} / {line.translation}")
        else:
            self.logger.info(f"♪ {line.text}")


class DiscordWebhookRenderer(IDisplayRenderer):
    """
    通过 Discord Webhook 显示歌词

    首次渲染发送一条消息，之后编辑同一条消息。
    状态不变时两次编辑之间至少间隔 min_interval 秒，间隔内的最新视图在间隔结束后补发。
    """

    def __init__(
        self,
        webhook_url: str,
        session: aiohttp.ClientSession,
        embed_builder: LyricsEmbedBuilder,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        初始化 Webhook 渲染器

        Args:
            webhook_url: Discord Webhook 地址
            session: aiohttp会话
            embed_builder: 嵌入消息构建器
            min_interval: 最小编辑间隔（秒）
            clock: 单调时钟
        """
        self.logger = logging.getLogger("cloudlyrics.ui.renderers")
        self.webhook = discord.Webhook.from_url(webhook_url, session=session)
        self.embed_builder = embed_builder
        self.min_interval = min_interval
        self._clock = clock

        self._message_id: Optional[int] = None
        self._last_status: Optional[DisplayStatus] = None
        self._last_sent_at: Optional[float] = None
        self._pending_view: Optional[LyricsView] = None
        self._flush_task: Optional[asyncio.Task] = None

    async def render(self, view: LyricsView) -> None:
        now = self._clock()
        if (
            view.status == self._last_status
            and self._last_sent_at is not None
            and now - self._last_sent_at < self.min_interval
        ):
            # 保留最新的视图，间隔结束后补发
            self._pending_view = view
            if self._flush_task is None or self._flush_task.done():
                delay = self.min_interval - (now - self._last_sent_at)
                self._flush_task = asyncio.create_task(self._flush_after(delay))
            return

        self._pending_view = None
        await self._publish(view, now)

    async def close(self) -> None:
        """取消尚未补发的消息"""
        if self._flush_task is not None and not self._flush_task.done():
            self._flush_task.cancel()
            await asyncio.gather(self._flush_task, return_exceptions=True)
        self._flush_task = None
        self._pending_view = None

    async def _flush_after(self, delay: float) -> None:
        await asyncio.sleep(delay)

        view = self._pending_view
        if view is None:
            return
        self._pending_view = None

        try:
            await self._publish(view, self._clock())
        except Exception as e:
            self.logger.warning(f"补发歌词消息失败: {e}")

    async def _publish(self, view: LyricsView, now: float) -> None:
        embed = self.embed_builder.build(view)

        if self._message_id is None:
            await self._send(embed)
        else:
            try:
                await self.webhook.edit_message(self._message_id, embed=embed)
            except discord.NotFound:
                self.logger.debug("歌词消息已被删除，重新发送")
                await self._send(embed)

        self._last_status = view.status
        self._last_sent_at = now

    async def _send(self, embed: discord.Embed) -> None:
        message = await self.webhook.send(embed=embed, wait=True)
        self._message_id = message.id
        self.logger.debug(f"歌词消息已发送: {message.id}")
