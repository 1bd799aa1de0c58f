"""Domain 层：领域模型、错误分类与抽象接口定义。"""

from .database import DatabaseInterface
from .errors import (
    BackendError,
    InvalidArgumentError,
    NotConfiguredError,
    ObjectNotFoundError,
    TaskCancelledError,
    UnknownBackendError,
)
from .models import BackendConfig, Continuation, RetrievalRequest, RetrievalTaskStatus

__all__ = [
    "BackendConfig",
    "BackendError",
    "Continuation",
    "DatabaseInterface",
    "InvalidArgumentError",
    "NotConfiguredError",
    "ObjectNotFoundError",
    "RetrievalRequest",
    "RetrievalTaskStatus",
    "TaskCancelledError",
    "UnknownBackendError",
]
