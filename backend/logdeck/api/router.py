"""
API 路由聚合
将所有子路由挂载到统一的 /api 前缀下
"""

from fastapi import APIRouter

from logdeck.api.pages import router as pages_router
from logdeck.api.logs import router as logs_router
from logdeck.api.analytics import router as analytics_router

# 主路由器，统一 /api 前缀
api_router = APIRouter(prefix="/api")

# 挂载各子路由（子路由自身已带 prefix，此处不再重复）
api_router.include_router(pages_router)
api_router.include_router(logs_router)
api_router.include_router(analytics_router)
