"""歌词同步器 - 协调歌词获取、解析、翻译合并和当前行定位"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Mapping, Tuple

from cloudlyrics.core.errors import LyricsFetchError
from cloudlyrics.core.interfaces import (
    DisplayLine,
    DisplayStatus,
    ILyricsFetcher,
    IOffsetStore,
    LyricsPayload,
    LyricsView,
    PlaybackState,
)
from cloudlyrics.utils.config_manager import LyricsCardConfig
from .lyrics_parser import LyricLine, LyricsParser
from .timeline import (
    build_translation_overlay,
    compute_current_instant,
    is_near,
    resolve_active_index,
    should_refresh,
)


@dataclass(frozen=True)
class SongLyrics:
    """
    一首歌的歌词数据

    时间线和翻译映射作为一个整体替换，渲染时不会读到新旧混合的数据。
    """
    song_id: str
    timeline: Tuple[LyricLine, ...] = ()
    translations: Mapping[float, str] = field(default_factory=dict)


class LyricsSynchronizer:
    """
    歌词同步器

    状态转换只有三类事件：歌曲切换、时钟滴答和偏移量调整。
    歌词获取是异步的，完成时如果歌曲已经切换则丢弃结果。
    """

    def __init__(
        self,
        config: LyricsCardConfig,
        fetcher: ILyricsFetcher,
        offset_store: IOffsetStore,
        parser: Optional[LyricsParser] = None
    ):
        """
        初始化歌词同步器

        Args:
            config: 歌词卡片配置
            fetcher: 歌词获取器
            offset_store: 偏移量存储
            parser: 歌词解析器（可选）
        """
        self.logger = logging.getLogger("cloudlyrics.lyrics.lyrics_synchronizer")

        self.config = config
        self.fetcher = fetcher
        self.offset_store = offset_store
        self.parser = parser or LyricsParser()

        self._playback: Optional[PlaybackState] = None
        self._entity_missing = False
        self._song_id = ""
        self._lyrics: Optional[SongLyrics] = None
        self._song_status = DisplayStatus.IDLE
        self._error: Optional[str] = None
        self._active_index = -1
        self._last_instant: Optional[float] = None

        self._offset = self.offset_store.load_offset()

        self.logger.debug(f"歌词同步器初始化完成 - 实体: {config.entity}, 偏移量: {self._offset:+.3f}s")

    # ========== 状态 ==========

    @property
    def status(self) -> DisplayStatus:
        if self._entity_missing:
            return DisplayStatus.ENTITY_NOT_FOUND
        return self._song_status

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def offset(self) -> float:
        return self._offset

    @property
    def current_song_id(self) -> str:
        return self._song_id

    @property
    def lyrics(self) -> Optional[SongLyrics]:
        return self._lyrics

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def playback(self) -> Optional[PlaybackState]:
        return self._playback

    # ========== 歌曲切换 ==========

    def update_playback(self, playback: Optional[PlaybackState]) -> Optional[str]:
        """
        更新播放器状态快照

        Args:
            playback: 最新的播放器状态，None 表示实体不存在

        Returns:
            歌曲发生切换时返回新的歌曲ID，否则返回None
        """
        if playback is None:
            if not self._entity_missing:
                self.logger.warning(f"实体不存在: {self.config.entity}")
            self._entity_missing = True
            self._playback = None
            return None

        self._entity_missing = False
        self._playback = playback

        if playback.song_id and playback.song_id != self._song_id:
            self.begin_song(playback.song_id)
            return playback.song_id

        return None

    def begin_song(self, song_id: str) -> None:
        """
        切换到新歌曲

        丢弃旧歌词，重置当前行和错误状态，进入加载状态。

        Args:
            song_id: 新歌曲ID
        """
        self.logger.info(f"歌曲切换: {self._song_id or '-'} -> {song_id}")
        self._song_id = song_id
        self._lyrics = None
        self._song_status = DisplayStatus.LOADING
        self._error = None
        self._active_index = -1
        self._last_instant = None

    async def on_song_changed(self, song_id: str) -> bool:
        """
        处理歌曲切换事件并加载歌词

        Args:
            song_id: 新歌曲ID

        Returns:
            歌词结果是否被应用（歌曲在加载期间再次切换时为False）
        """
        self.begin_song(song_id)
        return await self.load_lyrics(song_id)

    async def load_lyrics(self, song_id: str) -> bool:
        """
        获取并应用歌曲歌词

        Args:
            song_id: 发起获取时的歌曲ID

        Returns:
            结果是否被应用
        """
        try:
            payload = await self.fetcher.fetch_lyrics(song_id)
        except LyricsFetchError as e:
            return self.apply_failure(song_id, e)
        except Exception as e:
            self.logger.error(f"获取歌词时发生意外错误 '{song_id}': {e}", exc_info=True)
            return self.apply_failure(song_id, e)

        return self.apply_payload(song_id, payload)

    def apply_payload(self, song_id: str, payload: LyricsPayload) -> bool:
        """
        应用获取到的歌词

        Args:
            song_id: 发起获取时的歌曲ID
            payload: 歌词数据

        Returns:
            结果是否被应用
        """
        if song_id != self._song_id:
            self.logger.debug(f"丢弃过期的歌词结果: {song_id} (当前: {self._song_id})")
            return False

        timeline = tuple(self.parser.parse_lrc(payload.lrc))

        translations = {}
        if payload.tlyric and self.config.show_translation:
            translations = build_translation_overlay(timeline, payload.tlyric, self.parser)

        self._lyrics = SongLyrics(song_id=song_id, timeline=timeline, translations=translations)
        self._error = None
        self._active_index = -1
        self._last_instant = None

        if timeline:
            self._song_status = DisplayStatus.READY
            self.logger.info(f"歌词加载完成: {song_id} ({len(timeline)} 行, {len(translations)} 行翻译)")
        else:
            self._song_status = DisplayStatus.NO_LYRICS
            self.logger.info(f"暂无歌词: {song_id}")

        return True

    def apply_failure(self, song_id: str, error: Exception) -> bool:
        """
        应用歌词获取失败

        Args:
            song_id: 发起获取时的歌曲ID
            error: 获取时的异常

        Returns:
            结果是否被应用
        """
        if song_id != self._song_id:
            self.logger.debug(f"丢弃过期的歌词错误: {song_id} (当前: {self._song_id})")
            return False

        self.logger.error(f"获取歌词失败 '{song_id}': {error}")
        self._lyrics = SongLyrics(song_id=song_id)
        self._song_status = DisplayStatus.FETCH_FAILED
        self._error = str(error)
        self._active_index = -1
        return True

    # ========== 时钟 ==========

    def on_tick(self, now: float) -> bool:
        """
        重新计算当前播放时间和当前行

        Args:
            now: 当前Unix时间戳（秒）

        Returns:
            当前行索引是否发生变化
        """
        if self._playback is None or not self._lyrics or not self._lyrics.timeline:
            return False

        instant = compute_current_instant(self._playback, self._offset, now)
        if not should_refresh(instant, self._last_instant):
            return False
        self._last_instant = instant

        new_index = resolve_active_index(self._lyrics.timeline, instant)
        if new_index == self._active_index:
            return False

        self._active_index = new_index
        return True

    # ========== 偏移量 ==========

    def adjust_offset(self, delta: float) -> float:
        """
        调整同步偏移量（不设上下限）

        Args:
            delta: 偏移量增量（秒）

        Returns:
            调整后的偏移量
        """
        self._offset += delta
        self._on_offset_changed()
        return self._offset

    def step_offset(self, steps: int) -> float:
        """
        按配置步长调整偏移量

        Args:
            steps: 步数，正数表示歌词提前

        Returns:
            调整后的偏移量
        """
        return self.adjust_offset(steps * self.config.offset_step)

    def reset_offset(self) -> float:
        """重置偏移量为0"""
        self._offset = 0.0
        self._on_offset_changed()
        return self._offset

    def get_offset_millis(self) -> int:
        """获取以毫秒表示的偏移量（四舍五入）"""
        return int(round(self._offset * 1000))

    def _on_offset_changed(self) -> None:
        self.logger.info(f"歌词偏移量: {self.get_offset_millis():+d}ms")
        self._last_instant = None
        self.offset_store.save_offset(self._offset)

    # ========== 显示 ==========

    def get_display_lines(self) -> List[DisplayLine]:
        """
        获取用于渲染的歌词行投影

        Returns:
            按时间排序的显示行列表
        """
        if not self._lyrics:
            return []

        translations = self._lyrics.translations if self.config.show_translation else {}
        return [
            DisplayLine(
                text=line.text,
                translation=translations.get(line.time),
                is_current=index == self._active_index,
                is_near=is_near(index, self._active_index)
            )
            for index, line in enumerate(self._lyrics.timeline)
        ]

    def get_view(self) -> LyricsView:
        """获取当前状态的只读视图"""
        return LyricsView(
            status=self.status,
            lines=self.get_display_lines(),
            active_index=self._active_index,
            offset_ms=self.get_offset_millis(),
            playback=self._playback,
            position=self._last_instant,
            error=self._error
        )
