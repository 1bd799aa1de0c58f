"""FastAPI 服务入口。

提供的核心能力：
- 健康检查：返回后端是否已配置
- 对象读取：按路径与时间戳取回对象 JSON，响应体原样透传
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from ..core.logging import setup_logging
from ..domain.errors import (
    BackendError,
    InvalidArgumentError,
    NotConfiguredError,
    ObjectNotFoundError,
)
from ..domain.models import INT64_MAX, INT64_MIN
from ..services.factory import configure_from_settings, get_retrieval_service
from ..services.retrieval_service import RetrievalService
from .schemas import ErrorResponse, HealthResponse

setup_logging()


async def _startup() -> None:
    """应用启动初始化：按 BACKEND_* 配置默认检索服务（可选）。"""

    configure_from_settings(get_retrieval_service())


async def _shutdown() -> None:
    """应用关闭阶段清理：等待已投递的检索任务结束并关闭线程池。

    关闭后清除单例缓存，同一进程内之后的调用会得到新的服务实例。
    """

    service = get_retrieval_service()
    await asyncio.to_thread(service.shutdown, True)
    get_retrieval_service.cache_clear()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    """FastAPI 生命周期管理。"""

    await _startup()
    try:
        yield
    finally:
        await _shutdown()


app = FastAPI(title="tobject2json API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health", response_model=HealthResponse)
async def health(
    service: RetrievalService = Depends(get_retrieval_service),
) -> HealthResponse:
    """健康检查。"""

    config = service.config
    return HealthResponse(
        configured=config is not None,
        backend_type=config.type if config is not None else None,
    )


@app.get(
    "/api/objects/{path:path}",
    responses={
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def read_object(
    path: str,
    timestamp: int = Query(default=-1, ge=INT64_MIN, le=INT64_MAX, description="毫秒级时间戳，-1 表示最新"),
    service: RetrievalService = Depends(get_retrieval_service),
) -> Response:
    """按路径与时间戳读取对象 JSON。"""

    try:
        payload = await service.fetch(path, timestamp)
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ObjectNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except NotConfiguredError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except BackendError as exc:
        raise HTTPException(status_code=502, detail=f"后端检索失败: {exc}") from exc

    return Response(content=payload, media_type="application/json")
