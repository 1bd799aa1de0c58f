"""CCDB REST 后端实现（httpx 同步客户端）。

CCDB 以 `/{path}/{timestamp}/{key=value}...` 的 URL 形式寻址对象版本，
省略时间戳段表示取当前有效版本。
"""

import logging
from collections.abc import Mapping
from typing import Optional
from urllib.parse import quote

import httpx

from ...domain.database import DatabaseInterface
from ...domain.errors import BackendError, ObjectNotFoundError

# 初始化日志
log = logging.getLogger(__name__)


class CcdbDatabase(DatabaseInterface):
    """CCDB REST 后端。

    请求自动跟随重定向（CCDB 常将对象版本重定向到实际存储位置）。
    只接受 JSON 响应：存储位置若返回 ROOT 二进制等非 JSON 内容，
    按 `BackendError` 处理，不会把二进制当作文本交给调用方。
    未携带 content-type 的响应原样透传。
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        初始化 CCDB 后端。

        :param timeout: 单次 HTTP 请求超时（秒）
        :param verify_ssl: 是否校验 HTTPS 证书
        :param transport: 自定义 httpx 传输层（测试时注入 MockTransport）
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def connect(self, host: str, database: str, username: str, password: str) -> None:
        """
        创建指向 CCDB 的 HTTP 客户端。

        CCDB 没有“数据库名”的概念，database 参数被忽略；
        提供用户名时使用 HTTP Basic 认证。
        """
        if not host:
            raise BackendError("CCDB 主机地址为空")

        self.disconnect()
        base_url = host if "://" in host else f"http://{host}"
        auth = httpx.BasicAuth(username, password) if username else None

        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            auth=auth,
            timeout=self.timeout,
            verify=self.verify_ssl,
            follow_redirects=True,
            headers={"Accept": "application/json"},
            transport=self._transport,
        )
        log.debug(f"CCDB 客户端已创建，目标地址: {base_url}")

    def retrieve_json(self, path: str, timestamp: int, metadata: Mapping[str, str]) -> str:
        """
        [同步] 取回对象的 JSON 文本，响应体原样返回。
        """
        if self._client is None:
            raise BackendError("CCDB 尚未连接")

        url = build_object_url(path, timestamp, metadata)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise ObjectNotFoundError(path, timestamp) from e
            raise BackendError(
                f"CCDB 返回错误状态码: {e.response.status_code} - {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise BackendError(f"CCDB 网络连接错误: {e}") from e

        content_type = response.headers.get("content-type", "")
        if content_type and not _is_json_media_type(content_type):
            raise BackendError(f"CCDB 返回了非 JSON 内容: {content_type}")

        return response.text

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def build_object_url(path: str, timestamp: int, metadata: Mapping[str, str]) -> str:
    """
    构造对象版本的相对 URL。

    :param path: 对象路径（例如 "qc/TPC/MO/Clusters"）
    :param timestamp: 毫秒级时间戳；负数表示“最新”，此时省略时间戳段
    :param metadata: 元数据过滤条件，按键名排序后追加为 `key=value` 段
    :return: 以 "/" 开头的相对 URL
    """
    segments = [quote(path.strip("/"), safe="/")]
    if timestamp >= 0:
        segments.append(str(timestamp))
    for key in sorted(metadata):
        segments.append(f"{quote(key, safe='')}={quote(metadata[key], safe='')}")
    return "/" + "/".join(segments)


def _is_json_media_type(content_type: str) -> bool:
    """判断 content-type 是否为 JSON（application/json 或 +json 后缀）。"""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")
