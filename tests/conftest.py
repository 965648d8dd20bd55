"""
测试配置

提供歌词同步测试所需的fixtures
"""

import logging
from unittest.mock import Mock, AsyncMock

import pytest

from cloudlyrics.core.interfaces import IOffsetStore, LyricsPayload, PlaybackState
from cloudlyrics.utils.config_manager import LyricsCardConfig


SAMPLE_LRC = """[ti:测试歌曲]
[ar:测试歌手]
[al:测试专辑]
[by:tester]
[offset:0]
[00:00.00]作词 : 某人
[00:05.50]第一行歌词
[00:10.00]第二行歌词
[00:15.250]第三行歌词
[00:20.00][00:40.00]副歌
"""

SAMPLE_TLYRIC = """[by:translator]
[00:05.52]First line
[00:10.05]Second line
[00:15.40]Third line
"""


class MemoryOffsetStore(IOffsetStore):
    """内存偏移量存储"""

    def __init__(self, initial: float = 0.0):
        self.value = initial
        self.saved = []

    def load_offset(self) -> float:
        return self.value

    def save_offset(self, offset: float) -> None:
        self.value = offset
        self.saved.append(offset)


@pytest.fixture
def card_config():
    """创建卡片配置"""
    return LyricsCardConfig(entity="media_player.cloud_music")


@pytest.fixture
def offset_store():
    """创建内存偏移量存储"""
    return MemoryOffsetStore()


@pytest.fixture
def mock_fetcher():
    """创建模拟歌词获取器"""
    fetcher = Mock()
    fetcher.fetch_lyrics = AsyncMock(return_value=LyricsPayload(lrc=SAMPLE_LRC, tlyric=SAMPLE_TLYRIC))
    return fetcher


@pytest.fixture
def playing_state():
    """创建播放中的状态快照"""
    return PlaybackState(
        state="playing",
        reported_position=0.0,
        position_captured_at=1000.0,
        song_id="123",
        media_title="测试歌曲",
        media_artist="测试歌手",
        cover_url="/api/media_player_proxy/media_player.cloud_music?token=abc"
    )


@pytest.fixture(autouse=True)
def setup_logging():
    """设置测试日志"""
    # 禁用日志输出以保持测试输出清洁
    logging.getLogger("cloudlyrics").setLevel(logging.CRITICAL)
    yield
    logging.getLogger("cloudlyrics").setLevel(logging.DEBUG)
