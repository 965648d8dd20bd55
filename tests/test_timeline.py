"""
歌词时间线操作测试

测试翻译合并、当前行二分查找、播放时间推算和变化抑制。
"""

import pytest

from cloudlyrics.core.interfaces import PlaybackState
from cloudlyrics.lyrics.lyrics_parser import LyricLine, parse_lrc
from cloudlyrics.lyrics.timeline import (
    GRACE_SECONDS,
    NEAR_LINE_RANGE,
    POSITION_CHANGE_THRESHOLD,
    TRANSLATION_TOLERANCE_SECONDS,
    build_translation_overlay,
    compute_current_instant,
    is_near,
    resolve_active_index,
    should_refresh,
)
from tests.conftest import SAMPLE_LRC, SAMPLE_TLYRIC


def test_policy_constants():
    """测试策略常量"""
    assert GRACE_SECONDS == 0.3
    assert TRANSLATION_TOLERANCE_SECONDS == 0.1
    assert POSITION_CHANGE_THRESHOLD == 0.05
    assert NEAR_LINE_RANGE == 2


class TestResolveActiveIndex:
    """测试当前行查找"""

    @pytest.fixture
    def timeline(self):
        return [LyricLine(0.0, "a"), LyricLine(2.0, "b"), LyricLine(4.0, "c")]

    @pytest.mark.parametrize("instant", [-5.0, 0.0, 10.0, 1e9])
    def test_empty_timeline(self, instant):
        """测试空时间线始终返回-1"""
        assert resolve_active_index([], instant) == -1

    def test_single_line_grace_boundary(self):
        """测试单行时间线的缓冲边界"""
        timeline = [LyricLine(5.0, "a")]

        assert resolve_active_index(timeline, 0.0) == -1
        assert resolve_active_index(timeline, 5.29) == -1
        assert resolve_active_index(timeline, 5.3) == 0
        assert resolve_active_index(timeline, 5.31) == 0
        assert resolve_active_index(timeline, 1e6) == 0

    def test_three_lines(self, timeline):
        """测试三行时间线"""
        assert resolve_active_index(timeline, 0.29) == -1
        assert resolve_active_index(timeline, 0.31) == 0
        assert resolve_active_index(timeline, 2.29) == 0
        assert resolve_active_index(timeline, 2.35) == 1
        assert resolve_active_index(timeline, 4.31) == 2
        assert resolve_active_index(timeline, 100) == 2

    def test_monotonic_for_increasing_instants(self, timeline):
        """测试播放时间递增时索引不回退"""
        indices = [resolve_active_index(timeline, t / 10) for t in range(0, 80)]

        assert indices == sorted(indices)
        assert indices[-1] == 2

    def test_zero_grace(self, timeline):
        """测试不使用缓冲时的边界"""
        assert resolve_active_index(timeline, 0.0, grace=0) == 0
        assert resolve_active_index(timeline, 1.99, grace=0) == 0
        assert resolve_active_index(timeline, 2.0, grace=0) == 1

    def test_duplicate_times_pick_last(self):
        """测试相同时间的多行取最后一行"""
        timeline = [LyricLine(1.0, "a"), LyricLine(3.0, "b1"), LyricLine(3.0, "b2"), LyricLine(5.0, "c")]

        assert resolve_active_index(timeline, 3.5) == 2
        assert resolve_active_index(timeline, 5.0) == 2

    def test_matches_linear_scan(self):
        """测试与线性扫描结果一致"""
        timeline = [LyricLine(float(t), str(t)) for t in range(0, 300, 3)]

        for step in range(0, 3100, 7):
            instant = step / 10
            effective = instant - GRACE_SECONDS
            expected = -1
            for index, line in enumerate(timeline):
                if line.time <= effective:
                    expected = index
            assert resolve_active_index(timeline, instant) == expected


class TestTranslationOverlay:
    """测试翻译歌词合并"""

    def test_binding_within_tolerance(self):
        """测试容差内的翻译被绑定"""
        primary = [LyricLine(10.0, "原文")]

        assert build_translation_overlay(primary, "[00:10.05]译文") == {10.0: "译文"}

    def test_binding_outside_tolerance(self):
        """测试超出容差的翻译不被绑定"""
        primary = [LyricLine(10.0, "原文")]

        assert build_translation_overlay(primary, "[00:10.20]译文") == {}

    def test_keyed_by_primary_time(self):
        """测试以主歌词时间为键"""
        primary = parse_lrc(SAMPLE_LRC)

        overlay = build_translation_overlay(primary, SAMPLE_TLYRIC)

        assert overlay == {5.5: "First line", 10.0: "Second line"}

    def test_first_match_wins(self):
        """测试多个翻译行匹配同一主歌词行时保留第一个"""
        primary = [LyricLine(10.0, "原文")]

        overlay = build_translation_overlay(primary, "[00:09.95]早\n[00:10.05]晚")

        assert overlay == {10.0: "早"}

    def test_binds_to_first_primary_line_in_tolerance(self):
        """测试绑定到容差内的第一个主歌词行而非最近的行"""
        primary = [LyricLine(10.0, "a"), LyricLine(10.08, "b")]

        overlay = build_translation_overlay(primary, "[00:10.07]译文")

        assert overlay == {10.0: "译文"}

    def test_empty_inputs(self):
        """测试空输入"""
        assert build_translation_overlay([], "[00:01.00]x") == {}
        assert build_translation_overlay([LyricLine(1.0, "a")], "") == {}
        assert build_translation_overlay([LyricLine(1.0, "a")], None) == {}


class TestComputeCurrentInstant:
    """测试播放时间推算"""

    def test_playing_adds_elapsed(self):
        """测试播放中加上经过的时间"""
        playback = PlaybackState(state="playing", reported_position=30.0, position_captured_at=1000.0)

        assert compute_current_instant(playback, 0.0, 1002.5) == pytest.approx(32.5)

    def test_paused_ignores_elapsed(self):
        """测试暂停时不推算"""
        playback = PlaybackState(state="paused", reported_position=30.0, position_captured_at=1000.0)

        assert compute_current_instant(playback, 0.0, 1002.5) == pytest.approx(30.0)

    def test_missing_capture_time(self):
        """测试缺少上报时间"""
        playback = PlaybackState(state="playing", reported_position=30.0, position_captured_at=None)

        assert compute_current_instant(playback, 0.0, 1002.5) == pytest.approx(30.0)

    def test_capture_time_at_epoch_zero(self):
        """测试上报时间为0时仍然推算"""
        playback = PlaybackState(state="playing", reported_position=1.0, position_captured_at=0.0)

        assert compute_current_instant(playback, 0.0, 5.0) == pytest.approx(6.0)

    def test_offset_applied(self):
        """测试偏移量被叠加"""
        playback = PlaybackState(state="playing", reported_position=30.0, position_captured_at=1000.0)

        assert compute_current_instant(playback, -1.5, 1001.0) == pytest.approx(29.5)
        assert compute_current_instant(playback, 0.75, 1000.0) == pytest.approx(30.75)

    def test_non_numeric_position(self):
        """测试非数字位置按0处理"""
        playback = PlaybackState(state="paused", reported_position="abc", position_captured_at=None)

        assert compute_current_instant(playback, 0.5, 0.0) == pytest.approx(0.5)


class TestHelpers:
    """测试辅助函数"""

    def test_should_refresh(self):
        assert should_refresh(1.0, None)
        assert not should_refresh(1.04, 1.0)
        assert should_refresh(1.06, 1.0)
        assert should_refresh(0.9, 1.0)

    def test_is_near(self):
        assert is_near(3, 5)
        assert is_near(7, 5)
        assert not is_near(8, 5)
        assert is_near(1, -1)
        assert not is_near(2, -1)
