"""
日志相关的 Pydantic 请求/响应模型
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from logdeck.models.log import SEVERITIES
from logdeck.schemas.base import CamelModel, UtcDatetime
from logdeck.schemas.page import PageResponse


# ==================== 请求模型 ====================

class LogCreateRequest(CamelModel):
    """创建日志请求"""
    message: str = Field(..., min_length=1, description="日志消息")
    severity: str = Field(..., description="日志级别")
    page_id: int = Field(..., description="所属页面 ID")
    additional_data: Optional[dict[str, Any]] = Field(None, description="额外详情")

    @field_validator("severity")
    @classmethod
    def check_severity(cls, value: str) -> str:
        if value not in SEVERITIES:
            raise ValueError(f"severity 必须是以下之一: {', '.join(SEVERITIES)}")
        return value


# ==================== 响应模型 ====================

class LogResponse(CamelModel):
    """日志响应（message 为明文）"""
    id: int
    timestamp: UtcDatetime
    severity: str
    message: str
    additional_data: Optional[dict[str, Any]] = None
    page_id: int
    user_id: int
    created_at: UtcDatetime
    updated_at: UtcDatetime


class LogWithPageResponse(LogResponse):
    """日志响应（附带所属页面）"""
    page: Optional[PageResponse] = None
