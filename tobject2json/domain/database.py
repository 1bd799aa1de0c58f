"""数据库后端抽象接口。

Domain 层只定义“连接 + 按路径和时间戳取回 JSON”的能力，
具体存储（CCDB REST、MySQL、SQLite 等）由基础设施层实现。
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping


class DatabaseInterface(ABC):
    """数据库后端抽象接口。

    一个实例对应一个连接句柄，仅由一个检索任务独占使用，用完即释放。
    实现中的任何失败都应以 `BackendError`（或其子类）的形式抛出。
    """

    @abstractmethod
    def connect(self, host: str, database: str, username: str, password: str) -> None:
        """建立与后端的连接。

        Args:
            host: 主机地址，可带端口。
            database: 数据库名称。
            username: 用户名。
            password: 密码。
        """

    @abstractmethod
    def retrieve_json(self, path: str, timestamp: int, metadata: Mapping[str, str]) -> str:
        """取回指定路径对象在给定时间点的 JSON 表示。

        Args:
            path: 对象路径。
            timestamp: 查询时间戳（毫秒级 epoch；负数表示“最新”）。
            metadata: 附加元数据过滤条件。

        Returns:
            后端返回的 JSON 文本（原样透传，不做解析）。
        """

    @abstractmethod
    def disconnect(self) -> None:
        """释放连接句柄。重复调用应是安全的。"""
