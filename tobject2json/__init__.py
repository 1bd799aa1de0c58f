"""
tobject2json：按路径与时间戳异步获取 QC 对象 JSON 的轻量客户端。

本项目采用分层架构：
- domain：领域模型、错误分类与后端抽象接口
- infrastructure：后端适配（CCDB REST / SQLAlchemy）
- services：检索任务编排（后台线程池 + 回调）
- api：进程级入口函数 `init`/`get` 与 FastAPI 接口层
- core：配置、日志等通用能力
"""

from .api.bindings import get, init
from .domain.errors import (
    BackendError,
    InvalidArgumentError,
    NotConfiguredError,
    ObjectNotFoundError,
    TaskCancelledError,
    UnknownBackendError,
)

__all__ = [
    "BackendError",
    "InvalidArgumentError",
    "NotConfiguredError",
    "ObjectNotFoundError",
    "TaskCancelledError",
    "UnknownBackendError",
    "get",
    "init",
]
