"""数据库后端工厂：按类型名称创建 DatabaseInterface 实例。"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import lru_cache

from ...core.config import settings
from ...domain.database import DatabaseInterface
from ...domain.errors import UnknownBackendError
from .ccdb_database import CcdbDatabase
from .sqlalchemy_database import MySqlDatabase, SqliteDatabase

log = logging.getLogger(__name__)

DatabaseBuilder = Callable[[], DatabaseInterface]


class DatabaseFactory:
    """后端类型名称到构造函数的注册表。

    类型名称大小写不敏感，例如 "CCDB"、"ccdb"、"MySql" 均可。
    """

    def __init__(self) -> None:
        self._builders: dict[str, DatabaseBuilder] = {}

    def register(self, name: str, builder: DatabaseBuilder) -> None:
        """注册（或覆盖）一个后端类型。

        Args:
            name: 后端类型名称。
            builder: 无参构造函数，每次调用返回一个新的后端实例。
        """
        normalized_name = name.lower().strip()
        if not normalized_name:
            raise ValueError("后端类型名称不能为空")
        self._builders[normalized_name] = builder

    def available(self) -> list[str]:
        """返回已注册的后端类型名称（已归一化）。"""
        return sorted(self._builders)

    def create(self, name: str) -> DatabaseInterface:
        """创建一个新的后端实例。

        Raises:
            UnknownBackendError: 类型名称未注册时抛出。
        """
        normalized_name = name.lower().strip()
        builder = self._builders.get(normalized_name)
        if builder is None:
            raise UnknownBackendError(name, self.available())
        return builder()


def _build_ccdb() -> DatabaseInterface:
    return CcdbDatabase(timeout=settings.ccdb.timeout, verify_ssl=settings.ccdb.verify_ssl)


@lru_cache
def get_database_factory() -> DatabaseFactory:
    """创建并缓存默认的后端工厂（已注册内置后端）。"""

    factory = DatabaseFactory()
    factory.register("ccdb", _build_ccdb)
    factory.register("mysql", MySqlDatabase)
    factory.register("sqlite", SqliteDatabase)
    log.debug("默认后端工厂已创建，可用类型: %s", factory.available())
    return factory
