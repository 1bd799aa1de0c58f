"""领域模型定义：后端配置、检索请求与任务状态。"""

from collections.abc import Callable
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# 回调签名：(error, result)，二者恰有一个为 None
Continuation = Callable[[Optional[BaseException], Optional[str]], None]


class BackendConfig(BaseModel):
    """数据库后端连接配置。

    不可变对象：每个检索任务在创建时持有当前配置的引用，
    之后的重新配置只影响新创建的任务。

    Attributes:
        type: 后端类型名称（例如 "CCDB"、"MySql"、"sqlite"，大小写不敏感）。
        host: 主机地址，可带端口（例如 "ccdb:8080"）。
        database: 数据库名称（sqlite 下为数据库文件路径）。
        username: 用户名。
        password: 密码。
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="后端类型名称")
    host: str = Field(..., description="主机地址")
    database: str = Field(..., description="数据库名称")
    username: str = Field(..., description="用户名")
    password: str = Field(..., repr=False, description="密码")


class RetrievalRequest(BaseModel):
    """单次检索请求，仅在一个任务的生命周期内存在。

    Attributes:
        path: 对象路径（例如 "qc/TPC/MO/Clusters"）。
        timestamp: 查询时间点（毫秒级 epoch；负数表示“最新”）。
        metadata: 附加元数据过滤条件，默认为空。
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="对象路径")
    timestamp: int = Field(..., ge=INT64_MIN, le=INT64_MAX, description="查询时间戳")
    metadata: dict[str, str] = Field(default_factory=dict, description="附加元数据")


class RetrievalTaskStatus(StrEnum):
    """检索任务状态枚举。

    CREATED -> EXECUTING -> SUCCEEDED | FAILED；
    CANCELLED 只能由 CREATED 进入。
    """

    CREATED = "CREATED"
    EXECUTING = "EXECUTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
