"""对象检索服务：一次性后台检索任务与回调编排。

流程：
1) `configure` 保存不可变的后端配置（后写覆盖先写）；
2) `retrieve` 同步校验参数，创建任务并投递到有界线程池；
3) 任务在后台线程中新建连接、执行一次阻塞检索、释放连接；
4) 结果经由回调 `(error, result)` 恰好回传一次。若调用 `retrieve` 时存在运行中的
   asyncio 事件循环，回调在该事件循环线程中执行，否则在后台线程中执行。
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from ..domain.errors import (
    BackendError,
    InvalidArgumentError,
    NotConfiguredError,
    TaskCancelledError,
)
from ..domain.models import (
    INT64_MAX,
    INT64_MIN,
    BackendConfig,
    Continuation,
    RetrievalRequest,
    RetrievalTaskStatus,
)
from ..infrastructure.database.factory import DatabaseFactory

log = logging.getLogger(__name__)


class RetrievalTask:
    """一次性检索任务。

    任务在创建时持有配置快照；连接句柄只在 `_execute` 内存在，
    无论成功失败都会释放。状态只会单向推进：
    CREATED -> EXECUTING -> SUCCEEDED | FAILED，或 CREATED -> CANCELLED。
    """

    def __init__(
        self,
        request: RetrievalRequest,
        config: BackendConfig | None,
        continuation: Continuation,
        database_factory: DatabaseFactory,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.request = request
        self.config = config
        self._continuation = continuation
        self._database_factory = database_factory
        self._loop = loop
        self._status = RetrievalTaskStatus.CREATED
        self._lock = threading.Lock()
        self._future: Future[None] | None = None

    @property
    def status(self) -> RetrievalTaskStatus:
        return self._status

    def submit(self, executor: ThreadPoolExecutor) -> None:
        """将任务投递到线程池。

        线程池已关闭时不抛出，任务直接失败并经由回调收到 `BackendError`。
        """
        try:
            self._future = executor.submit(self._run)
        except RuntimeError as exc:
            with self._lock:
                self._status = RetrievalTaskStatus.FAILED
            log.error("检索任务投递失败 path=%s: %s", self.request.path, exc)
            error = BackendError(f"检索服务已关闭，无法投递任务: {exc}")
            error.__cause__ = exc
            self._deliver(error, None)

    def cancel(self) -> bool:
        """取消尚未开始执行的任务。

        取消成功时回调收到 `TaskCancelledError`；任务已开始执行或已结束时返回 False，
        此时回调仍会收到任务的真实结果。
        """
        with self._lock:
            if self._status != RetrievalTaskStatus.CREATED:
                return False
            self._status = RetrievalTaskStatus.CANCELLED

        if self._future is not None:
            self._future.cancel()
        log.info("检索任务已取消 path=%s", self.request.path)
        self._deliver(TaskCancelledError(self.request.path), None)
        return True

    def _run(self) -> None:
        with self._lock:
            if self._status != RetrievalTaskStatus.CREATED:
                return
            self._status = RetrievalTaskStatus.EXECUTING

        try:
            output = self._execute()
        except BackendError as exc:
            log.error(
                "检索失败 path=%s timestamp=%s: %s",
                self.request.path,
                self.request.timestamp,
                exc,
                exc_info=True,
            )
            self._status = RetrievalTaskStatus.FAILED
            self._deliver(exc, None)
            return

        self._status = RetrievalTaskStatus.SUCCEEDED
        self._deliver(None, output)

    def _execute(self) -> str:
        """新建连接并执行一次阻塞检索（在后台线程中运行）。"""
        config = self.config
        if config is None:
            raise NotConfiguredError()

        try:
            database = self._database_factory.create(config.type)
            try:
                database.connect(config.host, config.database, config.username, config.password)
                return database.retrieve_json(
                    self.request.path,
                    self.request.timestamp,
                    dict(self.request.metadata),
                )
            finally:
                database.disconnect()
        except BackendError:
            raise
        except Exception as exc:
            raise BackendError(f"后端检索出现未预期的错误: {exc}") from exc

    def _deliver(self, error: Optional[BaseException], result: Optional[str]) -> None:
        """将结果交回调用方上下文。"""
        if self._loop is None:
            self._invoke_in_worker(error, result)
            return
        try:
            self._loop.call_soon_threadsafe(self._continuation, error, result)
        except RuntimeError:
            # 调用方的事件循环已关闭，结果已无人接收
            log.warning("事件循环已关闭，丢弃检索结果 path=%s", self.request.path)

    def _invoke_in_worker(self, error: Optional[BaseException], result: Optional[str]) -> None:
        try:
            self._continuation(error, result)
        except Exception:
            log.error("检索回调执行出错 path=%s", self.request.path, exc_info=True)


class RetrievalService:
    """检索服务：持有当前后端配置与有界线程池。"""

    def __init__(
        self,
        database_factory: DatabaseFactory,
        max_workers: int = 4,
        thread_name_prefix: str = "tobject2json",
    ) -> None:
        """初始化服务。

        Args:
            database_factory: 后端工厂，用于在任务内按类型创建后端实例。
            max_workers: 同时执行的检索任务上限，超出的任务排队等待。
            thread_name_prefix: 后台线程名前缀。
        """
        self._database_factory = database_factory
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._config: BackendConfig | None = None

    @property
    def config(self) -> BackendConfig | None:
        """当前后端配置；尚未配置时为 None。"""
        return self._config

    def configure(
        self,
        backend_type: str,
        host: str,
        database: str,
        username: str,
        password: str,
    ) -> None:
        """设置后端配置，覆盖之前的配置。

        只影响之后创建的任务；已创建的任务继续使用创建时的配置。

        Raises:
            InvalidArgumentError: 任一参数不是字符串时抛出，此时原配置保持不变。
        """
        values = {
            "backend_type": backend_type,
            "host": host,
            "database": database,
            "username": username,
            "password": password,
        }
        for name, value in values.items():
            if not isinstance(value, str):
                raise InvalidArgumentError(f"参数 {name} 必须是字符串，实际为 {type(value).__name__}")

        self._config = BackendConfig(
            type=backend_type,
            host=host,
            database=database,
            username=username,
            password=password,
        )
        log.info("数据库后端已配置 type=%s host=%s database=%s", backend_type, host, database)

    def retrieve(
        self,
        path: str,
        timestamp: int,
        continuation: Continuation,
        metadata: Mapping[str, str] | None = None,
    ) -> RetrievalTask:
        """异步检索对象 JSON。

        参数校验在投递任务之前同步完成；之后的任何后端失败都只经由回调传递。

        Args:
            path: 对象路径（非空字符串）。
            timestamp: 查询时间戳（64 位有符号整数范围内）。
            continuation: 回调 `(error, result)`，恰好调用一次。
            metadata: 附加元数据过滤条件，默认为空。

        Returns:
            检索任务句柄，可用于在执行前取消。

        Raises:
            InvalidArgumentError: 参数类型或取值不合法时抛出，此时不会创建任务。
        """
        if not callable(continuation):
            raise InvalidArgumentError("continuation 必须是可调用对象")
        request = _build_request(path, timestamp, metadata)

        try:
            loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        task = RetrievalTask(
            request=request,
            config=self._config,
            continuation=continuation,
            database_factory=self._database_factory,
            loop=loop,
        )
        task.submit(self._executor)
        log.debug("检索任务已投递 path=%s timestamp=%s", request.path, request.timestamp)
        return task

    async def fetch(
        self,
        path: str,
        timestamp: int,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        """[异步] 检索对象 JSON 并直接返回结果。

        Raises:
            InvalidArgumentError: 参数不合法时抛出。
            BackendError: 后端检索失败时抛出。
        """
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[str] = loop.create_future()

        def _continuation(error: Optional[BaseException], result: Optional[str]) -> None:
            if waiter.done():
                return
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(result or "")

        task = self.retrieve(path, timestamp, _continuation, metadata=metadata)
        try:
            return await waiter
        except asyncio.CancelledError:
            task.cancel()
            raise

    def shutdown(self, wait: bool = True) -> None:
        """关闭线程池。已投递的任务仍会执行完毕并回调。"""
        self._executor.shutdown(wait=wait)


def _build_request(
    path: object,
    timestamp: object,
    metadata: Mapping[str, str] | None,
) -> RetrievalRequest:
    """校验并构造检索请求。"""

    if not isinstance(path, str) or not path:
        raise InvalidArgumentError("path 必须是非空字符串")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise InvalidArgumentError(f"timestamp 必须是整数，实际为 {type(timestamp).__name__}")
    if not INT64_MIN <= timestamp <= INT64_MAX:
        raise InvalidArgumentError(f"timestamp 超出 64 位整数范围: {timestamp}")

    if metadata is not None and not isinstance(metadata, Mapping):
        raise InvalidArgumentError("metadata 必须是字典")
    items = dict(metadata or {})
    for key, value in items.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidArgumentError("metadata 的键和值都必须是字符串")

    return RetrievalRequest(path=path, timestamp=timestamp, metadata=items)
