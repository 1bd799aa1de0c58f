"""数据库后端适配（CCDB REST / SQLAlchemy）。"""

from .ccdb_database import CcdbDatabase
from .factory import DatabaseFactory, get_database_factory
from .sqlalchemy_database import MySqlDatabase, SqlAlchemyDatabase, SqliteDatabase

__all__ = [
    "CcdbDatabase",
    "DatabaseFactory",
    "MySqlDatabase",
    "SqlAlchemyDatabase",
    "SqliteDatabase",
    "get_database_factory",
]
