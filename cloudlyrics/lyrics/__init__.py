"""
歌词模块 - 歌词获取、解析和同步功能

提供LRC格式解析、翻译歌词合并、基于播放位置的当前行定位等功能。
"""

from .lyrics_client import CloudMusicLyricsClient
from .lyrics_parser import LyricsParser, LyricLine, parse_lrc
from .lyrics_synchronizer import LyricsSynchronizer, SongLyrics

__all__ = [
    'CloudMusicLyricsClient',
    'LyricsParser',
    'LyricLine',
    'parse_lrc',
    'LyricsSynchronizer',
    'SongLyrics'
]
