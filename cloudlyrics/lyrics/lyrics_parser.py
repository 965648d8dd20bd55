"""LRC格式歌词解析器"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional


# LRC时间戳: [mm:ss.xx] 或 [mm:ss.xxx]
TIMESTAMP_PATTERN = re.compile(r'\[(\d{2}):(\d{2})\.(\d{2,3})\]')

# 需要忽略的元数据标签
METADATA_TAGS = ('ti', 'ar', 'al', 'by', 'offset')
METADATA_PATTERN = re.compile(r'^\[(?:%s):' % '|'.join(METADATA_TAGS))


@dataclass(frozen=True)
class LyricLine:
    """表示带时间戳的单行歌词"""
    time: float  # 时间（秒）
    text: str  # 歌词文本


class LyricsParser:
    """
    LRC格式歌词解析器

    将带时间戳的歌词文本转换为按时间排序的歌词时间线。
    解析是尽力而为的：格式错误的行会被跳过，不会抛出异常。
    """

    def __init__(self):
        """初始化歌词解析器"""
        self.logger = logging.getLogger("cloudlyrics.lyrics.lyrics_parser")
        self.timestamp_pattern = TIMESTAMP_PATTERN
        self.metadata_pattern = METADATA_PATTERN

    def parse_lrc(self, lrc_content: Optional[str]) -> List[LyricLine]:
        """
        将LRC格式歌词解析为LyricLine列表

        一行带有多个时间戳时，每个时间戳生成一个独立的歌词行，文本相同。

        Args:
            lrc_content: LRC格式歌词内容

        Returns:
            按时间升序排列的LyricLine列表（相同时间保持原始顺序）
        """
        if not lrc_content:
            return []

        lines: List[LyricLine] = []

        for raw_line in lrc_content.split('\n'):
            # 跳过元数据行
            if self.metadata_pattern.match(raw_line):
                continue

            timestamps = self.timestamp_pattern.findall(raw_line)
            if not timestamps:
                continue

            text = self.timestamp_pattern.sub('', raw_line).strip()
            if not text:
                continue

            for minutes, seconds, fraction in timestamps:
                lines.append(LyricLine(
                    time=self._convert_timestamp_to_seconds(minutes, seconds, fraction),
                    text=text
                ))

        # sort() 是稳定排序，相同时间的行保持出现顺序
        lines.sort(key=lambda line: line.time)

        self.logger.debug(f"解析了 {len(lines)} 行歌词")
        return lines

    @staticmethod
    def _convert_timestamp_to_seconds(minutes: str, seconds: str, fraction: str) -> float:
        """
        将LRC时间戳转换为秒

        两位小数按厘秒处理（乘以10得到毫秒），三位小数直接作为毫秒。

        Args:
            minutes: 分钟
            seconds: 秒
            fraction: 小数部分（2或3位）

        Returns:
            以浮点数表示的时间（秒）
        """
        milliseconds = int(fraction) * 10 if len(fraction) == 2 else int(fraction)
        return int(minutes) * 60 + int(seconds) + milliseconds / 1000


_default_parser = LyricsParser()


def parse_lrc(lrc_content: Optional[str]) -> List[LyricLine]:
    """使用默认解析器解析LRC歌词"""
    return _default_parser.parse_lrc(lrc_content)


def format_time(seconds: float) -> str:
    """
    将秒数格式化为MM:SS格式

    Args:
        seconds: 时间（秒）

    Returns:
        格式化的时间字符串
    """
    seconds = int(max(0, seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"
