"""
歌词显示服务 - 驱动歌词同步器的时钟和事件循环

负责：
- 周期性读取播放器状态并在歌曲切换时加载歌词
- 以帧频率触发同步器重新定位当前行
- 当前行或状态变化时通知渲染器
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Set

from cloudlyrics.core.errors import PlaybackReadError
from cloudlyrics.core.interfaces import DisplayStatus, IDisplayRenderer, IPlaybackReader
from cloudlyrics.lyrics.lyrics_synchronizer import LyricsSynchronizer


class LyricsDisplayService:
    """
    歌词显示服务

    所有状态变更都在事件循环中顺序执行，不需要加锁。
    歌词获取以后台任务运行，过期结果由同步器丢弃。
    """

    def __init__(
        self,
        synchronizer: LyricsSynchronizer,
        reader: IPlaybackReader,
        renderers: Optional[List[IDisplayRenderer]] = None,
        tick_interval: float = 0.033,
        poll_interval: float = 1.0,
        clock: Callable[[], float] = time.time
    ):
        """
        初始化歌词显示服务

        Args:
            synchronizer: 歌词同步器
            reader: 播放器状态读取器
            renderers: 渲染器列表
            tick_interval: 时钟间隔（秒）
            poll_interval: 播放器状态轮询间隔（秒）
            clock: 返回当前Unix时间戳的函数
        """
        self.logger = logging.getLogger("cloudlyrics.playback.display_service")

        self.synchronizer = synchronizer
        self.reader = reader
        self.renderers = list(renderers or [])
        self.tick_interval = tick_interval
        self.poll_interval = poll_interval
        self._clock = clock

        self._tick_task: Optional[asyncio.Task] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._song_tasks: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def start(self) -> None:
        """启动轮询和时钟任务"""
        if self.is_running:
            return

        self._poll_task = asyncio.create_task(self._poll_loop())
        self._tick_task = asyncio.create_task(self._tick_loop())
        self.logger.info(
            f"歌词显示服务已启动 - 实体: {self.synchronizer.config.entity}, "
            f"时钟间隔: {self.tick_interval}s, 轮询间隔: {self.poll_interval}s"
        )

    async def stop(self) -> None:
        """停止所有任务"""
        tasks = [task for task in (self._tick_task, self._poll_task) if task is not None]
        tasks.extend(self._song_tasks)

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._tick_task = None
        self._poll_task = None
        self._song_tasks.clear()
        self.logger.info("歌词显示服务已停止")

    async def poll_once(self) -> Optional[str]:
        """
        读取一次播放器状态

        Returns:
            歌曲发生切换时返回新的歌曲ID
        """
        try:
            playback = await self.reader.read_state(self.synchronizer.config.entity)
        except PlaybackReadError as e:
            self.logger.warning(f"读取播放器状态失败: {e}")
            return None

        previous_status = self.synchronizer.status
        new_song_id = self.synchronizer.update_playback(playback)

        if new_song_id:
            task = asyncio.create_task(self._load_song(new_song_id))
            self._song_tasks.add(task)
            task.add_done_callback(self._song_tasks.discard)

        if new_song_id or self.synchronizer.status != previous_status:
            await self.render()

        return new_song_id

    async def tick(self) -> bool:
        """
        触发一次时钟

        Returns:
            当前行是否发生变化
        """
        changed = self.synchronizer.on_tick(self._clock())
        if changed:
            await self.render()
        return changed

    async def render(self) -> None:
        """将当前视图发送给所有渲染器"""
        view = self.synchronizer.get_view()
        for renderer in self.renderers:
            try:
                await renderer.render(view)
            except Exception as e:
                self.logger.warning(f"渲染器 {type(renderer).__name__} 出错: {e}")

    async def _load_song(self, song_id: str) -> None:
        if not await self.synchronizer.load_lyrics(song_id):
            return

        await self.render()
        if self.synchronizer.status == DisplayStatus.READY:
            # 歌词就绪后立即定位，无需等待下一次时钟
            await self.tick()

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception as e:
                self.logger.error(f"轮询播放器状态时出错: {e}", exc_info=True)
            await asyncio.sleep(self.poll_interval)

    async def _tick_loop(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception as e:
                self.logger.error(f"时钟处理时出错: {e}", exc_info=True)
            await asyncio.sleep(self.tick_interval)
