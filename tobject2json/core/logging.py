import logging
import sys
from typing import Optional

from .config import settings

# 后台检索线程与调用方线程交错输出，格式中带上线程名
LOG_FORMAT = "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s"

# 第三方库在 DEBUG/INFO 下会逐请求、逐语句输出，压到 WARNING
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "sqlalchemy.pool")


def resolve_level(level: Optional[str] = None) -> int:
    """
    将日志级别名解析为 logging 数值级别。

    :param level: 级别名（大小写不敏感）；为 None 时取 settings.log_level（LOG_LEVEL）
    :raises ValueError: 级别名无效
    """
    name = (level or settings.log_level).strip().upper()
    numeric_level = logging.getLevelName(name)
    if not isinstance(numeric_level, int):
        raise ValueError(f"无效的日志级别: {name}")
    return numeric_level


def setup_logging(level: Optional[str] = None) -> None:
    """
    配置全局日志记录器。

    由 HTTP 服务启动时调用；作为库被导入（init/get）时不会自动调用，
    日志配置交由宿主程序决定。根记录器已有 handler 时不做任何修改。
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    numeric_level = resolve_level(level)
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, stream=sys.stdout)

    quiet_level = max(numeric_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.getLogger(__name__).info("日志系统已初始化，级别: %s", logging.getLevelName(numeric_level))
