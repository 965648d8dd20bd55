"""
LRC歌词解析器测试

测试时间戳转换、元数据过滤、多时间戳行和排序规则。
"""

import pytest

from cloudlyrics.lyrics.lyrics_parser import LyricLine, LyricsParser, format_time, parse_lrc
from tests.conftest import SAMPLE_LRC


class TestLyricsParser:
    """测试LRC歌词解析器"""

    @pytest.fixture
    def parser(self):
        """创建解析器实例"""
        return LyricsParser()

    def test_parse_sample(self, parser):
        """测试解析完整歌词"""
        lines = parser.parse_lrc(SAMPLE_LRC)

        assert [line.text for line in lines] == [
            "作词 : 某人", "第一行歌词", "第二行歌词", "第三行歌词", "副歌", "副歌"
        ]
        assert [line.time for line in lines] == pytest.approx([0.0, 5.5, 10.0, 15.25, 20.0, 40.0])

    def test_empty_input(self, parser):
        """测试空输入"""
        assert parser.parse_lrc("") == []
        assert parser.parse_lrc(None) == []
        assert parse_lrc("\n\n") == []

    def test_multiple_timestamps(self, parser):
        """测试一行多个时间戳"""
        lines = parser.parse_lrc("[00:01.00][00:02.50]lyric")

        assert lines == [LyricLine(time=1.0, text="lyric"), LyricLine(time=2.5, text="lyric")]

    def test_two_and_three_digit_fractions(self, parser):
        """测试两位和三位小数的换算"""
        assert parser.parse_lrc("[00:01.50]a")[0].time == pytest.approx(1.5)
        assert parser.parse_lrc("[00:01.500]a")[0].time == pytest.approx(1.5)
        assert parser.parse_lrc("[00:01.05]a")[0].time == pytest.approx(1.05)
        assert parser.parse_lrc("[00:01.005]a")[0].time == pytest.approx(1.005)
        assert parser.parse_lrc("[02:03.45]a")[0].time == pytest.approx(123.45)

    def test_metadata_lines_skipped(self, parser):
        """测试元数据行不会产生歌词"""
        text = "[ar:Someone 00:01.00]\n[ti:[00:01.00]x]\n[offset:500]\n[al:Album][00:02.00]y\n[by:me]"

        assert parser.parse_lrc(text) == []

    def test_unknown_tags_without_timestamp_skipped(self, parser):
        """测试未知标签和无时间戳的行被跳过"""
        text = "[re:editor]\nplain text\n[00:03.00]ok"

        assert parser.parse_lrc(text) == [LyricLine(time=3.0, text="ok")]

    def test_empty_text_skipped(self, parser):
        """测试只有时间戳没有文本的行被跳过"""
        assert parser.parse_lrc("[00:01.00]   \n[00:02.00][00:03.00]") == []

    def test_malformed_timestamps_skipped(self, parser):
        """测试格式错误的时间戳"""
        text = "[0:01.00]a\n[00:01]b\n[00:01.5]c\n[00:01.5000]d\n[00:04.00]e"

        assert parser.parse_lrc(text) == [LyricLine(time=4.0, text="e")]

    def test_text_between_tags_kept(self, parser):
        """测试时间戳之间的文本被保留"""
        lines = parser.parse_lrc("[00:01.00]hello [00:02.00]world")

        assert [line.text for line in lines] == ["hello world", "hello world"]

    def test_windows_line_endings(self, parser):
        """测试CRLF换行"""
        lines = parser.parse_lrc("[00:01.00]a\r\n[00:02.00]b\r\n")

        assert [line.text for line in lines] == ["a", "b"]

    def test_sorted_and_stable(self, parser):
        """测试按时间排序且相同时间保持原顺序"""
        text = "[00:05.00]late\n[00:01.00]first\n[00:03.00]tie-a\n[00:03.00]tie-b\n[00:02.00]second"

        lines = parser.parse_lrc(text)

        assert [line.text for line in lines] == ["first", "second", "tie-a", "tie-b", "late"]
        assert all(a.time <= b.time for a, b in zip(lines, lines[1:]))

    def test_parsing_is_idempotent(self, parser):
        """测试重复解析结果一致"""
        assert parser.parse_lrc(SAMPLE_LRC) == parser.parse_lrc(SAMPLE_LRC)

    def test_lyric_line_is_immutable(self):
        """测试歌词行不可变"""
        line = LyricLine(time=1.0, text="a")
        with pytest.raises(AttributeError):
            line.text = "b"


class TestFormatTime:
    """测试时间格式化"""

    def test_format_time(self):
        assert format_time(0) == "00:00"
        assert format_time(65.9) == "01:05"
        assert format_time(-3) == "00:00"
