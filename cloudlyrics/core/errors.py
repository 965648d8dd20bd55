"""
异常定义 - 歌词同步系统的错误分类

配置错误在启动时立即抛出；获取和读取错误由同步器转换为显示状态，
不会中断渲染循环。
"""

from typing import Optional


class CloudLyricsError(Exception):
    """所有 cloudlyrics 异常的基类"""


class ConfigurationError(CloudLyricsError, ValueError):
    """配置缺失或无效（例如未配置媒体播放器实体）"""


class LyricsFetchError(CloudLyricsError):
    """
    歌词获取失败

    包括非2xx状态码、网络错误和无法解析的响应体。
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class PlaybackReadError(CloudLyricsError):
    """读取播放器状态失败（实体不存在不属于此类错误）"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
