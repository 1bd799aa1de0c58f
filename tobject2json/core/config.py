from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- 路径配置 ---
# tobject2json/core/config.py -> tobject2json -> 项目根目录
PROJECT_ROOT = Path(__file__).resolve().parents[2]
BASE_DIR = PROJECT_ROOT

# 优先使用项目根目录的 .env；如果不存在，则回退到上一级目录（便于 monorepo 复用同一份 .env）。
_ENV_CANDIDATES = [PROJECT_ROOT / ".env", PROJECT_ROOT.parent / ".env"]
ENV_FILE_PATH = next((p for p in _ENV_CANDIDATES if p.exists()), _ENV_CANDIDATES[0])


class BaseConfigSettings(BaseSettings):
    """
    基础配置类，定义通用的加载行为。
    """
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding='utf-8',
        extra="ignore",           # 忽略多余字段
        frozen=True,              # 不可变
        case_sensitive=False,     # 大小写不敏感
    )


class BackendSettings(BaseConfigSettings):
    """
    数据库后端默认配置 (BACKEND_*)。

    仅在 HTTP 服务启动时使用：若设置了 type，则用这组参数初始化默认检索服务。
    以库的方式使用时，请显式调用 `init(...)`。
    """
    model_config = SettingsConfigDict(env_prefix="BACKEND_")

    type: Optional[str] = None
    host: str = ""
    database: str = ""
    username: str = ""
    password: str = ""


class WorkerSettings(BaseConfigSettings):
    """后台线程池配置 (WORKER_*)"""
    model_config = SettingsConfigDict(env_prefix="WORKER_")

    max_workers: int = Field(default=4, ge=1)
    thread_name_prefix: str = "tobject2json"


class CcdbSettings(BaseConfigSettings):
    """CCDB REST 客户端配置 (CCDB_*)"""
    model_config = SettingsConfigDict(env_prefix="CCDB_")

    timeout: float = 30.0
    verify_ssl: bool = True


class ApiSettings(BaseConfigSettings):
    """HTTP 服务监听配置 (API_*)"""
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000


class Settings(BaseConfigSettings):
    """
    主配置类，聚合所有子配置。
    """
    # --- 全局 ---
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # --- 模块 ---
    backend: BackendSettings = Field(default_factory=BackendSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    ccdb: CcdbSettings = Field(default_factory=CcdbSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


# --- 实例化 ---
try:
    settings = Settings()
except Exception as e:
    print(f"!!! 严重错误: 无法从 {ENV_FILE_PATH} 加载配置。")
    print(f"错误详情: {e}")
    if "validation error" in str(e).lower():
        print("提示: 请检查 .env 文件中 BACKEND_/WORKER_/CCDB_ 前缀的配置是否合法。")
    raise e
