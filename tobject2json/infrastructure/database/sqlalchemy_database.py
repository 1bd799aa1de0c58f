"""基于 SQLAlchemy 的数据库后端实现（MySQL / SQLite）。"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from sqlalchemy import Connection, Engine, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...domain.database import DatabaseInterface
from ...domain.errors import BackendError, ObjectNotFoundError
from ..db.factory import (
    build_database_url,
    create_database_engine,
    dumps_metadata,
    init_schema,
    loads_metadata,
)
from ..db.models import QcObjectOrm
from ..db.time import resolve_timestamp

log = logging.getLogger(__name__)


class SqlAlchemyDatabase(DatabaseInterface):
    """从 qc_objects 表按有效期取回对象 JSON 的后端实现。

    每个实例在 `connect` 时创建独立的 Engine 与 Connection，
    `disconnect` 时关闭连接并 dispose Engine。
    """

    drivername: str = ""

    def __init__(self, drivername: str | None = None) -> None:
        """初始化后端。

        Args:
            drivername: SQLAlchemy 驱动名；未指定时使用子类的 `drivername`。
        """
        self._drivername = drivername or self.drivername
        if not self._drivername:
            raise ValueError("必须指定 SQLAlchemy 驱动名")
        self._engine: Engine | None = None
        self._connection: Connection | None = None

    def connect(self, host: str, database: str, username: str, password: str) -> None:
        self.disconnect()
        url = build_database_url(self._drivername, host, database, username, password)
        try:
            engine = create_database_engine(url)
            connection = engine.connect()
        except SQLAlchemyError as exc:
            raise BackendError(f"连接数据库失败 {url.render_as_string(hide_password=True)}: {exc}") from exc
        self._engine = engine
        self._connection = connection
        log.debug("已连接数据库 %s", url.render_as_string(hide_password=True))

    def retrieve_json(self, path: str, timestamp: int, metadata: Mapping[str, str]) -> str:
        """取回 path 在 timestamp 时刻有效的最新版本对象。

        有效期为 [valid_from, valid_until)；多个版本同时有效时取 valid_from 最大者，
        并要求 metadata 中的每一对键值都与对象元数据一致。
        """
        connection = self._require_connection()
        at = resolve_timestamp(timestamp)
        stmt = (
            select(QcObjectOrm)
            .where(
                QcObjectOrm.path == path,
                QcObjectOrm.valid_from <= at,
                or_(QcObjectOrm.valid_until.is_(None), QcObjectOrm.valid_until > at),
            )
            .order_by(QcObjectOrm.valid_from.desc(), QcObjectOrm.id.desc())
        )

        try:
            with Session(bind=connection) as session:
                for orm_obj in session.scalars(stmt):
                    if _metadata_matches(loads_metadata(orm_obj.metadata_json), metadata):
                        return orm_obj.payload_json
        except SQLAlchemyError as exc:
            raise BackendError(f"查询对象失败 path={path}: {exc}") from exc

        raise ObjectNotFoundError(path, timestamp)

    def disconnect(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # ==================== 写入辅助（用于初始化/导入数据） ====================

    def init_schema(self) -> None:
        """在当前连接的数据库中创建 qc_objects 表。"""
        if self._engine is None:
            raise BackendError("数据库尚未连接")
        try:
            init_schema(self._engine)
        except SQLAlchemyError as exc:
            raise BackendError(f"初始化表结构失败: {exc}") from exc

    def store_json(
        self,
        path: str,
        payload_json: str,
        *,
        valid_from: int,
        valid_until: int | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> int:
        """写入一个对象版本。

        Args:
            path: 对象路径。
            payload_json: 对象的 JSON 文本（必须是合法 JSON）。
            valid_from: 有效期起点（毫秒级 epoch，含）。
            valid_until: 有效期终点（毫秒级 epoch，不含）；None 表示无上界。
            metadata: 对象元数据。

        Returns:
            新记录的自增 ID。

        Raises:
            ValueError: payload 不是合法 JSON 或有效期非法时抛出。
        """
        json.loads(payload_json)
        if valid_until is not None and valid_until <= valid_from:
            raise ValueError(f"valid_until({valid_until}) 必须大于 valid_from({valid_from})")

        orm_obj = QcObjectOrm(
            path=path,
            valid_from=valid_from,
            valid_until=valid_until,
            payload_json=payload_json,
            metadata_json=dumps_metadata(dict(metadata or {})),
        )
        connection = self._require_connection()
        try:
            with Session(bind=connection) as session:
                session.add(orm_obj)
                session.commit()
                return orm_obj.id
        except SQLAlchemyError as exc:
            raise BackendError(f"写入对象失败 path={path}: {exc}") from exc

    def _require_connection(self) -> Connection:
        if self._connection is None:
            raise BackendError("数据库尚未连接")
        return self._connection


class MySqlDatabase(SqlAlchemyDatabase):
    """MySQL / MariaDB 后端（PyMySQL 驱动）。"""

    drivername = "mysql+pymysql"


class SqliteDatabase(SqlAlchemyDatabase):
    """SQLite 后端：database 参数为数据库文件路径，host/用户名/密码被忽略。"""

    drivername = "sqlite"

    def connect(self, host: str, database: str, username: str, password: str) -> None:
        super().connect("", database, "", "")


def _metadata_matches(stored: Mapping[str, str], wanted: Mapping[str, str]) -> bool:
    """判断对象元数据是否包含所有要求的键值对。"""

    return all(stored.get(key) == value for key, value in wanted.items())
