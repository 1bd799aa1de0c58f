import logging
from functools import lru_cache

from ..core.config import settings
from ..infrastructure.database.factory import get_database_factory
from .retrieval_service import RetrievalService

log = logging.getLogger(__name__)


@lru_cache()
def get_retrieval_service() -> RetrievalService:
    """
    [工厂方法] 组装并获取进程级默认的 RetrievalService 单例。

    线程池大小取自 WORKER_* 配置；后端配置需通过 `init(...)`
    或 `configure_from_settings` 另行设置。
    """
    log.info("正在组装 RetrievalService，线程数: %s", settings.worker.max_workers)
    return RetrievalService(
        database_factory=get_database_factory(),
        max_workers=settings.worker.max_workers,
        thread_name_prefix=settings.worker.thread_name_prefix,
    )


def configure_from_settings(service: RetrievalService) -> bool:
    """若 BACKEND_TYPE 已设置，则用 BACKEND_* 配置初始化服务。

    Returns:
        是否完成了配置。
    """
    backend = settings.backend
    if not backend.type:
        log.warning("未设置 BACKEND_TYPE，检索服务保持未配置状态")
        return False

    service.configure(
        backend.type,
        backend.host,
        backend.database,
        backend.username,
        backend.password,
    )
    return True
