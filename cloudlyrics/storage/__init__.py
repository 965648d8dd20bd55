"""存储模块 - 用户偏好的持久化"""

from .offset_store import JsonOffsetStore

__all__ = [
    "JsonOffsetStore"
]
