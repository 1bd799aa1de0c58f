"""数据库 Engine 工厂与元数据序列化工具。"""

from __future__ import annotations

import json

from pydantic import TypeAdapter
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL

from .models import Base

_METADATA_ADAPTER = TypeAdapter(dict[str, str])


def split_host_port(host: str) -> tuple[str | None, int | None]:
    """将 "host:port" 形式的地址拆分为主机与端口。

    Args:
        host: 主机地址，可带端口；空字符串表示未指定。

    Returns:
        (host, port)，未指定的部分为 None。
    """

    if not host:
        return None, None
    name, sep, port = host.rpartition(":")
    if sep and port.isdigit() and name:
        return name, int(port)
    return host, None


def build_database_url(
    drivername: str,
    host: str,
    database: str,
    username: str,
    password: str,
) -> URL:
    """根据连接参数构造 SQLAlchemy 数据库 URL。

    Args:
        drivername: SQLAlchemy 驱动名（例如 "mysql+pymysql"、"sqlite"）。
        host: 主机地址，可带端口。
        database: 数据库名称（sqlite 下为文件路径）。
        username: 用户名（空字符串表示不使用）。
        password: 密码（空字符串表示不使用）。
    """

    hostname, port = split_host_port(host)
    return URL.create(
        drivername,
        username=username or None,
        password=password or None,
        host=hostname,
        port=port,
        database=database or None,
    )


def create_database_engine(url: URL) -> Engine:
    """创建同步 Engine。

    检索在后台线程中以阻塞方式执行，因此这里使用同步 Engine，
    每个连接句柄各自持有并在释放时 dispose。
    """

    return create_engine(url, pool_pre_ping=True)


def init_schema(engine: Engine) -> None:
    """初始化数据库表结构（create_all）。"""

    Base.metadata.create_all(engine)


def dumps_metadata(metadata: dict[str, str]) -> str:
    """序列化 metadata 为 JSON 字符串。"""

    return json.dumps(metadata, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def loads_metadata(metadata_json: str) -> dict[str, str]:
    """反序列化 metadata JSON 字符串为字典。"""

    raw: object
    try:
        raw = json.loads(metadata_json)
    except json.JSONDecodeError:
        return {}
    try:
        return _METADATA_ADAPTER.validate_python(raw)
    except Exception:
        return {}
