"""API 请求/响应模型定义。"""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """健康检查响应。"""

    status: str = Field(default="ok", description="服务状态")
    configured: bool = Field(..., description="数据库后端是否已配置")
    backend_type: str | None = Field(default=None, description="当前后端类型（未配置时为空）")


class ErrorResponse(BaseModel):
    """错误响应。"""

    detail: str = Field(..., description="错误详情")
