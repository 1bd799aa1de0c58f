"""测试公共夹具：可编程的后端替身与检索服务。"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

import pytest

from tobject2json.domain.database import DatabaseInterface
from tobject2json.domain.errors import BackendError, ObjectNotFoundError
from tobject2json.infrastructure.database.factory import DatabaseFactory
from tobject2json.services.retrieval_service import RetrievalService

WAIT_TIMEOUT = 5.0


@dataclass
class StubBackendState:
    """后端替身的共享状态：预置对象、注入故障并记录调用。"""

    objects: dict[str, str] = field(default_factory=dict)
    failures: dict[str, Exception] = field(default_factory=dict)
    # path -> 在 retrieve_json 中等待的事件，用于模拟慢查询
    gates: dict[str, threading.Event] = field(default_factory=dict)
    # path -> 在 retrieve_json 中等待的屏障，用于证明任务并发执行
    barriers: dict[str, threading.Barrier] = field(default_factory=dict)

    connects: list[tuple[str, str, str, str]] = field(default_factory=list)
    retrievals: list[tuple[str, int, dict[str, str]]] = field(default_factory=list)
    created: int = 0
    disconnected: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)


class StubDatabase(DatabaseInterface):
    """用于测试的后端替身。"""

    def __init__(self, state: StubBackendState) -> None:
        self._state = state
        self._connected = False
        with state.lock:
            state.created += 1

    def connect(self, host: str, database: str, username: str, password: str) -> None:
        with self._state.lock:
            self._state.connects.append((host, database, username, password))
        self._connected = True

    def retrieve_json(self, path: str, timestamp: int, metadata: Mapping[str, str]) -> str:
        if not self._connected:
            raise BackendError("not connected")
        with self._state.lock:
            self._state.retrievals.append((path, timestamp, dict(metadata)))

        barrier = self._state.barriers.get(path)
        if barrier is not None:
            barrier.wait(timeout=WAIT_TIMEOUT)
        gate = self._state.gates.get(path)
        if gate is not None:
            gate.wait(timeout=WAIT_TIMEOUT)

        failure = self._state.failures.get(path)
        if failure is not None:
            raise failure
        if path not in self._state.objects:
            raise ObjectNotFoundError(path, timestamp)
        return self._state.objects[path]

    def disconnect(self) -> None:
        if self._connected:
            with self._state.lock:
                self._state.disconnected += 1
        self._connected = False


@pytest.fixture
def stub_state() -> StubBackendState:
    """提供后端替身的共享状态。"""

    return StubBackendState()


@pytest.fixture
def stub_factory(stub_state: StubBackendState) -> DatabaseFactory:
    """提供只注册了 "stub" 类型的后端工厂。"""

    factory = DatabaseFactory()
    factory.register("stub", lambda: StubDatabase(stub_state))
    return factory


@pytest.fixture
def service(stub_factory: DatabaseFactory) -> Iterator[RetrievalService]:
    """提供使用后端替身的检索服务，测试结束后关闭线程池。"""

    svc = RetrievalService(database_factory=stub_factory, max_workers=4, thread_name_prefix="test-retrieval")
    yield svc
    svc.shutdown(wait=True)
