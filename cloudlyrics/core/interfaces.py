"""
核心接口定义 - 定义歌词同步器与外部协作者之间的抽象接口

同步器只依赖这些接口：歌词获取、播放器状态读取、偏移量持久化和显示渲染。
具体实现（aiohttp客户端、JSON文件存储、Discord渲染器）可以独立替换和测试。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List


@dataclass(frozen=True)
class LyricsPayload:
    """歌词接口返回的原始歌词数据"""
    lrc: Optional[str] = None  # 主歌词（LRC格式）
    tlyric: Optional[str] = None  # 翻译歌词（LRC格式）


@dataclass
class PlaybackState:
    """
    播放器状态快照

    reported_position 只在播放器上报时刷新，因此需要配合
    position_captured_at 推算当前真实位置。
    """
    state: str
    reported_position: float = 0.0
    position_captured_at: Optional[float] = None  # Unix时间戳（秒）
    song_id: str = ""
    media_title: Optional[str] = None
    media_artist: Optional[str] = None
    cover_url: Optional[str] = None

    @property
    def is_playing(self) -> bool:
        return self.state == "playing"

    @classmethod
    def from_attributes(cls, state: str, attributes: Dict[str, Any]) -> "PlaybackState":
        """
        从 Home Assistant 实体属性构建播放状态

        Args:
            state: 实体状态（playing/paused/idle...）
            attributes: 实体属性字典

        Returns:
            PlaybackState 实例
        """
        try:
            position = float(attributes.get("media_position") or 0)
        except (TypeError, ValueError):
            position = 0.0

        song_id = attributes.get("song_id")
        return cls(
            state=state,
            reported_position=position,
            position_captured_at=_parse_timestamp(attributes.get("media_position_updated_at")),
            song_id=str(song_id) if song_id else "",
            media_title=attributes.get("media_title"),
            media_artist=attributes.get("media_artist"),
            cover_url=attributes.get("entity_picture") or attributes.get("media_image_url"),
        )


def _parse_timestamp(value: Any) -> Optional[float]:
    """将ISO-8601时间字符串或数字转换为Unix时间戳，无法解析时返回None"""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


class DisplayStatus(Enum):
    """歌词显示状态"""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    NO_LYRICS = "no_lyrics"
    FETCH_FAILED = "fetch_failed"
    ENTITY_NOT_FOUND = "entity_not_found"


@dataclass(frozen=True)
class DisplayLine:
    """供渲染使用的单行歌词投影"""
    text: str
    translation: Optional[str]
    is_current: bool
    is_near: bool


@dataclass(frozen=True)
class LyricsView:
    """交给渲染器的只读视图快照"""
    status: DisplayStatus
    lines: List[DisplayLine] = field(default_factory=list)
    active_index: int = -1
    offset_ms: int = 0
    playback: Optional[PlaybackState] = None
    position: Optional[float] = None  # 最近一次定位使用的播放时间（秒）
    error: Optional[str] = None  # 获取失败时的错误信息

    @property
    def current_line(self) -> Optional[DisplayLine]:
        if 0 <= self.active_index < len(self.lines):
            return self.lines[self.active_index]
        return None


class ILyricsFetcher(ABC):
    """歌词获取接口"""

    @abstractmethod
    async def fetch_lyrics(self, song_id: str) -> LyricsPayload:
        """获取歌词，传输失败时抛出 LyricsFetchError"""
        pass


class IPlaybackReader(ABC):
    """播放器状态读取接口"""

    @abstractmethod
    async def read_state(self, entity_id: str) -> Optional[PlaybackState]:
        """读取播放器状态，实体不存在时返回None"""
        pass


class IOffsetStore(ABC):
    """偏移量持久化接口"""

    @abstractmethod
    def load_offset(self) -> float:
        """加载偏移量，不存在或损坏时返回0"""
        pass

    @abstractmethod
    def save_offset(self, offset: float) -> None:
        """保存偏移量，失败时静默忽略"""
        pass


class IDisplayRenderer(ABC):
    """显示渲染接口"""

    @abstractmethod
    async def render(self, view: LyricsView) -> None:
        """渲染歌词视图"""
        pass
