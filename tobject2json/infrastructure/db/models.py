"""SQLAlchemy ORM 表模型定义。"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .time import utc_now


class Base(DeclarativeBase):
    """SQLAlchemy Declarative Base。"""


class QcObjectOrm(Base):
    """qc_objects 表：按路径与有效期版本化存储的对象 JSON。"""

    __tablename__ = "qc_objects"
    __table_args__ = (Index("ix_qc_objects_path_valid_from", "path", "valid_from"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(String(512), nullable=False)

    # 有效期为 [valid_from, valid_until)，单位为毫秒级 epoch；valid_until 为空表示无上界
    valid_from: Mapped[int] = mapped_column(BigInteger, nullable=False)
    valid_until: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    payload_json: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_json: Mapped[str] = mapped_column(Text, default="{}", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
