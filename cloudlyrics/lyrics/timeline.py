"""
歌词时间线操作 - 翻译合并、当前行查找和播放时间推算

这里的函数都是纯函数，不持有状态，由 LyricsSynchronizer 组合使用。
"""

from bisect import bisect_right
from typing import Dict, Optional, Sequence

from cloudlyrics.core.interfaces import PlaybackState
from .lyrics_parser import LyricLine, LyricsParser


# 查找前从播放时间中扣除的缓冲，避免第一行在播放开始瞬间高亮
GRACE_SECONDS = 0.3

# 翻译行与主歌词行的最大时间差（不含）
TRANSLATION_TOLERANCE_SECONDS = 0.1

# 播放时间变化小于此值时跳过重新计算
POSITION_CHANGE_THRESHOLD = 0.05

# 当前行前后被视为"临近"的行数
NEAR_LINE_RANGE = 2


def build_translation_overlay(
    primary: Sequence[LyricLine],
    translation_raw: Optional[str],
    parser: Optional[LyricsParser] = None,
    tolerance: float = TRANSLATION_TOLERANCE_SECONDS
) -> Dict[float, str]:
    """
    将翻译歌词按时间戳对齐到主歌词

    每个翻译行绑定到第一个时间差小于容差的主歌词行，以该主歌词行的时间为键。
    多个翻译行落到同一主歌词行时保留最先扫描到的一个。

    Args:
        primary: 主歌词时间线
        translation_raw: LRC格式翻译歌词
        parser: 歌词解析器（可选）
        tolerance: 匹配容差（秒）

    Returns:
        主歌词时间到翻译文本的映射
    """
    if not primary or not translation_raw:
        return {}

    parser = parser or LyricsParser()
    overlay: Dict[float, str] = {}

    for translated in parser.parse_lrc(translation_raw):
        match = next(
            (line for line in primary if abs(line.time - translated.time) < tolerance),
            None
        )
        if match is not None and match.time not in overlay:
            overlay[match.time] = translated.text

    return overlay


def resolve_active_index(
    timeline: Sequence[LyricLine],
    instant: float,
    grace: float = GRACE_SECONDS
) -> int:
    """
    二分查找当前歌词索引

    返回时间戳不晚于 instant - grace 的最后一行。到达最后一行后保持在最后一行。

    Args:
        timeline: 按时间排序的歌词时间线
        instant: 当前播放时间（秒，已包含偏移量）
        grace: 缓冲时间（秒）

    Returns:
        当前歌词索引，-1 表示尚未开始
    """
    if not timeline:
        return -1

    effective = instant - grace
    if effective < timeline[0].time:
        return -1

    last = len(timeline) - 1
    if effective >= timeline[last].time:
        return last

    return bisect_right(timeline, effective, key=_line_time) - 1


def _line_time(line: LyricLine) -> float:
    return line.time


def compute_current_instant(playback: PlaybackState, offset: float, now: float) -> float:
    """
    推算当前播放时间

    播放器只会周期性上报位置，播放中需要加上自上报以来经过的时间。

    Args:
        playback: 播放器状态快照
        offset: 用户同步偏移量（秒）
        now: 当前Unix时间戳（秒）

    Returns:
        用于查找当前行的播放时间（秒）
    """
    try:
        position = float(playback.reported_position or 0)
    except (TypeError, ValueError):
        position = 0.0

    if playback.is_playing and playback.position_captured_at is not None:
        position += now - playback.position_captured_at

    return position + offset


def should_refresh(
    instant: float,
    last_instant: Optional[float],
    threshold: float = POSITION_CHANGE_THRESHOLD
) -> bool:
    """播放时间变化是否足以触发重新计算"""
    if last_instant is None:
        return True
    return abs(instant - last_instant) >= threshold


def is_near(index: int, active_index: int, near_range: int = NEAR_LINE_RANGE) -> bool:
    """判断歌词行是否在当前行附近"""
    return abs(index - active_index) <= near_range
