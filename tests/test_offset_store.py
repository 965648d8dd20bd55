"""
偏移量存储测试
"""

import json

from cloudlyrics.storage.offset_store import JsonOffsetStore


class TestJsonOffsetStore:
    """测试JSON偏移量存储"""

    def test_missing_file_defaults_to_zero(self, tmp_path):
        """测试文件不存在时返回0"""
        store = JsonOffsetStore(str(tmp_path / "offsets.json"), "media_player.a")

        assert store.load_offset() == 0.0

    def test_save_and_load(self, tmp_path):
        """测试保存后加载"""
        path = tmp_path / "data" / "offsets.json"
        store = JsonOffsetStore(str(path), "media_player.a")

        store.save_offset(-1.5)

        assert path.exists()
        assert JsonOffsetStore(str(path), "media_player.a").load_offset() == -1.5

    def test_entities_stored_separately(self, tmp_path):
        """测试不同实体的偏移量互不影响"""
        path = str(tmp_path / "offsets.json")
        JsonOffsetStore(path, "media_player.a").save_offset(0.5)
        JsonOffsetStore(path, "media_player.b").save_offset(2.0)

        assert JsonOffsetStore(path, "media_player.a").load_offset() == 0.5
        assert JsonOffsetStore(path, "media_player.b").load_offset() == 2.0

    def test_corrupt_file(self, tmp_path):
        """测试损坏的文件"""
        path = tmp_path / "offsets.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonOffsetStore(str(path), "media_player.a")

        assert store.load_offset() == 0.0

        # 损坏的文件会被覆盖
        store.save_offset(1.0)
        assert store.load_offset() == 1.0

    def test_invalid_value(self, tmp_path):
        """测试非数字的偏移量"""
        path = tmp_path / "offsets.json"
        path.write_text(json.dumps({"offsets": {"media_player.a": "fast", "media_player.b": True}}), encoding="utf-8")

        assert JsonOffsetStore(str(path), "media_player.a").load_offset() == 0.0
        assert JsonOffsetStore(str(path), "media_player.b").load_offset() == 0.0

    def test_save_failure_swallowed(self, tmp_path):
        """测试写入失败不抛出异常"""
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        store = JsonOffsetStore(str(blocker / "offsets.json"), "media_player.a")

        store.save_offset(1.0)

        assert store.load_offset() == 0.0
