"""
偏移量存储 - 持久化用户的歌词同步偏移量

使用JSON文件存储，每个媒体播放器实体一个偏移量。
读取失败回退为0，写入失败只记录日志，不影响显示。
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

from cloudlyrics.core.interfaces import IOffsetStore


class JsonOffsetStore(IOffsetStore):
    """
    JSON文件偏移量存储

    文件格式: {"offsets": {"media_player.xxx": 0.5}, "last_updated": "..."}
    """

    def __init__(self, file_path: str, entity_id: str):
        """
        初始化偏移量存储

        Args:
            file_path: JSON文件路径
            entity_id: 媒体播放器实体ID，作为存储键
        """
        self.logger = logging.getLogger("cloudlyrics.storage.offset_store")
        self.file_path = Path(file_path)
        self.entity_id = entity_id

    def load_offset(self) -> float:
        """
        加载偏移量

        Returns:
            偏移量（秒），文件不存在或内容无效时返回0
        """
        offsets = self._read_file().get("offsets")
        value = offsets.get(self.entity_id, 0.0) if isinstance(offsets, dict) else 0.0

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self.logger.warning(f"偏移量数据无效，使用默认值 - 实体 {self.entity_id}: {value!r}")
            return 0.0

        return float(value)

    def save_offset(self, offset: float) -> None:
        """
        保存偏移量

        Args:
            offset: 偏移量（秒）
        """
        try:
            data = self._read_file()
            offsets = data.get("offsets")
            if not isinstance(offsets, dict):
                offsets = {}
            offsets[self.entity_id] = offset

            save_data = {
                "offsets": offsets,
                "last_updated": datetime.now().isoformat()
            }

            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.file_path, 'w', encoding='utf-8') as f:
                json.dump(save_data, f, ensure_ascii=False, indent=2)

            self.logger.debug(f"偏移量保存成功 - 实体 {self.entity_id}: {offset:+.3f}s")
        except (OSError, TypeError, ValueError) as e:
            self.logger.warning(f"保存偏移量失败 - 实体 {self.entity_id}: {e}")

    def _read_file(self) -> Dict[str, Any]:
        """读取存储文件，失败时返回空字典"""
        if not self.file_path.exists():
            return {}

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"读取偏移量文件失败: {e}")
            return {}

        return data if isinstance(data, dict) else {}
