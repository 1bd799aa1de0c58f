"""错误分类定义。

两类错误的传播方式不同：
- `InvalidArgumentError`：调用方的编程错误，在入口处同步抛出，绝不经由回调传递；
- `BackendError` 及其子类：后端的运行期失败，总是经由回调的 error 参数异步传递，绝不跨越异步边界抛出。
"""


class InvalidArgumentError(TypeError):
    """入口参数数量或类型不合法时抛出的异常。"""


class BackendError(RuntimeError):
    """数据库后端在连接或检索过程中产生的任意失败。"""


class NotConfiguredError(BackendError):
    """尚未调用 `init`/`configure` 即发起检索时产生的错误。"""

    def __init__(self) -> None:
        super().__init__("数据库后端尚未配置，请先调用 init()")


class UnknownBackendError(BackendError):
    """后端类型未注册时产生的错误。

    Attributes:
        backend_type: 无法识别的后端类型名称。
    """

    def __init__(self, backend_type: str, available: list[str] | None = None) -> None:
        message = f"未知的数据库后端类型: '{backend_type}'"
        if available:
            message += f"。可用选项: {available}"
        super().__init__(message)
        self.backend_type = backend_type


class ObjectNotFoundError(BackendError):
    """指定路径与时间戳下不存在对象时产生的错误。

    Attributes:
        path: 对象路径。
        timestamp: 查询时间戳。
    """

    def __init__(self, path: str, timestamp: int) -> None:
        super().__init__(f"未找到对象 path={path} timestamp={timestamp}")
        self.path = path
        self.timestamp = timestamp


class TaskCancelledError(BackendError):
    """任务在开始执行前被取消时传递给回调的错误。"""

    def __init__(self, path: str) -> None:
        super().__init__(f"检索任务已取消 path={path}")
        self.path = path
