"""对象读取接口集成测试（httpx.ASGITransport；lifespan 单独测试）。"""

from __future__ import annotations

import asyncio

import httpx
import pytest
import pytest_asyncio

from tobject2json.api.server import app, lifespan
from tobject2json.domain.errors import BackendError
from tobject2json.services.factory import get_retrieval_service
from tobject2json.services.retrieval_service import RetrievalService


@pytest_asyncio.fixture(autouse=True)
async def override_dependencies(service: RetrievalService):
    """覆盖 FastAPI 依赖，使用后端替身的检索服务。"""

    app.dependency_overrides[get_retrieval_service] = lambda: service
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_reports_configuration(client: httpx.AsyncClient, service: RetrievalService) -> None:
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "configured": False, "backend_type": None}

    service.configure("stub", "ccdb:8080", "qcdb", "user", "pw")
    resp = await client.get("/api/health")
    assert resp.json() == {"status": "ok", "configured": True, "backend_type": "stub"}


@pytest.mark.asyncio
async def test_read_object_returns_payload_verbatim(client: httpx.AsyncClient, service: RetrievalService, stub_state) -> None:
    """成功：响应体原样透传后端返回的 JSON 文本。"""

    payload = '{"_typename":"TH1F","fName":"obj1","fEntries":12}'
    stub_state.objects["qc/TEST/obj1"] = payload
    service.configure("stub", "ccdb:8080", "qcdb", "user", "pw")

    resp = await client.get("/api/objects/qc/TEST/obj1", params={"timestamp": 1000})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.text == payload
    assert stub_state.retrievals == [("qc/TEST/obj1", 1000, {})]


@pytest.mark.asyncio
async def test_read_object_defaults_to_latest(client: httpx.AsyncClient, service: RetrievalService, stub_state) -> None:
    stub_state.objects["qc/TEST/obj1"] = "{}"
    service.configure("stub", "ccdb:8080", "qcdb", "user", "pw")

    resp = await client.get("/api/objects/qc/TEST/obj1")

    assert resp.status_code == 200
    assert stub_state.retrievals == [("qc/TEST/obj1", -1, {})]


@pytest.mark.asyncio
async def test_read_object_error_mapping(client: httpx.AsyncClient, service: RetrievalService, stub_state) -> None:
    """覆盖：未配置 503、对象不存在 404、后端失败 502。"""

    resp = await client.get("/api/objects/qc/TEST/obj1")
    assert resp.status_code == 503

    service.configure("stub", "ccdb:8080", "qcdb", "user", "pw")
    resp = await client.get("/api/objects/qc/TEST/missing")
    assert resp.status_code == 404

    stub_state.failures["qc/TEST/broken"] = BackendError("connection refused")
    resp = await client.get("/api/objects/qc/TEST/broken")
    assert resp.status_code == 502
    assert "connection refused" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_read_object_rejects_non_integer_timestamp(client: httpx.AsyncClient, service: RetrievalService, stub_state) -> None:
    service.configure("stub", "ccdb:8080", "qcdb", "user", "pw")

    resp = await client.get("/api/objects/qc/TEST/obj1", params={"timestamp": "yesterday"})

    assert resp.status_code == 422
    assert stub_state.created == 0


@pytest.mark.asyncio
async def test_lifespan_shutdown_replaces_default_service() -> None:
    """关闭阶段停止线程池并清除单例，之后获取到的是新的可用服务。"""

    get_retrieval_service.cache_clear()
    async with lifespan(app):
        before = get_retrieval_service()
    after = get_retrieval_service()
    try:
        assert after is not before

        results: list[tuple[object, object]] = []
        done = asyncio.Event()

        def _continuation(error, result):
            results.append((error, result))
            done.set()

        before.retrieve("qc/TEST/obj1", 1000, _continuation)
        await asyncio.wait_for(done.wait(), timeout=5.0)
        (error, result), = results
        assert isinstance(error, BackendError)
        assert result is None
    finally:
        after.shutdown(wait=True)
        get_retrieval_service.cache_clear()
