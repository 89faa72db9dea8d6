"""
页面相关的 Pydantic 请求/响应模型
"""

from pydantic import Field

from logdeck.schemas.base import CamelModel, UtcDatetime


# ==================== 请求模型 ====================

class PageWriteRequest(CamelModel):
    """创建/更新页面请求（标题和 emoji 均为必填非空字符串）"""
    title: str = Field(..., min_length=1, max_length=200, description="页面标题")
    emoji: str = Field(..., min_length=1, max_length=32, description="页面 emoji")


# ==================== 响应模型 ====================

class PageResponse(CamelModel):
    """页面响应"""
    id: int
    title: str
    emoji: str
    user_id: int
    created_at: UtcDatetime
    updated_at: UtcDatetime


class SuccessResponse(CamelModel):
    """通用成功响应"""
    success: bool = True
