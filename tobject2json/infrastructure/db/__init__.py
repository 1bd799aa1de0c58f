"""数据库基础设施（SQLAlchemy）。

该包负责：
- 根据连接参数构造 URL 并创建 Engine
- ORM 表模型定义（qc_objects）
- 提供初始化表结构的入口（create_all）
"""

from .factory import build_database_url, create_database_engine, init_schema

__all__ = [
    "build_database_url",
    "create_database_engine",
    "init_schema",
]
