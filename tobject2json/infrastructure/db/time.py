"""时间相关工具函数。"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """获取当前 UTC 时间（带时区）。"""

    return datetime.now(timezone.utc)


def epoch_millis_now() -> int:
    """获取当前时间的毫秒级 epoch 时间戳。"""

    return int(utc_now().timestamp() * 1000)


def resolve_timestamp(timestamp: int) -> int:
    """将“最新”语义的负数时间戳解析为当前时间。

    Args:
        timestamp: 毫秒级 epoch 时间戳；负数表示“最新”。

    Returns:
        非负的毫秒级时间戳。
    """

    if timestamp < 0:
        return epoch_millis_now()
    return timestamp
