"""进程级入口函数：`init` 与 `get`。

两者以宽松的位置参数形式接收调用，在入口处完成参数数量与类型校验，
再委托给默认的 RetrievalService 单例。
"""

from __future__ import annotations

from ..domain.errors import InvalidArgumentError
from ..services.factory import get_retrieval_service
from ..services.retrieval_service import RetrievalTask


def init(*args: object) -> None:
    """配置数据库后端。

    用法：`init(type, host, database, username, password)`，五个参数均为字符串。
    可重复调用，后一次覆盖前一次，只影响之后发起的检索。

    Raises:
        InvalidArgumentError: 参数少于 5 个或存在非字符串参数时抛出（多余参数被忽略），原配置保持不变。
    """
    if len(args) < 5 or not isinstance(args[0], str):
        raise InvalidArgumentError("Invalid argument")

    backend_type, host, database, username, password = args[:5]
    get_retrieval_service().configure(backend_type, host, database, username, password)


def get(*args: object) -> RetrievalTask:
    """异步获取对象的 JSON 表示。

    用法：`get(path, timestamp, continuation)`，其中 continuation 形如
    `continuation(error, result)`：成功时为 `(None, json_text)`，失败时为 `(error, None)`。

    Raises:
        InvalidArgumentError: 参数少于 3 个，或第三个参数不可调用时抛出（多余参数被忽略），此时不会创建任务。
    """
    if len(args) < 3:
        raise InvalidArgumentError("Invalid argument count")
    if not callable(args[2]):
        raise InvalidArgumentError("Invalid argument types")

    path, timestamp, continuation = args[:3]
    return get_retrieval_service().retrieve(path, timestamp, continuation)
