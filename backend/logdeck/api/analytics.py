"""
日志分析相关 API 路由
只读聚合，日志表不存在时各接口独立返回零值/空结果
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logdeck.api.logs import to_log_response
from logdeck.core.analytics import (
    empty_analytics,
    get_log_analytics,
    get_message_patterns,
    get_performance_metrics,
    get_recent_anomalies,
)
from logdeck.core.crypto import get_cipher
from logdeck.core.errors import is_missing_table
from logdeck.database.connection import get_db
from logdeck.schemas.log import LogWithPageResponse
from logdeck.schemas.stats import LogAnalytics, MessagePattern, PerformanceMetrics

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/logs", tags=["日志分析"])


async def _run_read(db: AsyncSession, action: str, query, fallback):
    """执行只读聚合；表不存在返回 fallback，其余错误返回 500"""
    try:
        return await query(db)
    except SQLAlchemyError as e:
        await db.rollback()
        if is_missing_table(e):
            logger.warning(f"日志表不存在，{action}返回空结果")
            return fallback
        logger.error(f"{action}失败: {e}")
        raise HTTPException(status_code=500, detail=f"{action}失败")


@router.get("/analytics", response_model=LogAnalytics, summary="日志分析汇总")
async def log_analytics(
    db: AsyncSession = Depends(get_db),
):
    """
    获取日志分析数据
    包含总数、错误率、严重问题数、热门页面、级别分布
    """
    return await _run_read(db, "生成日志分析", get_log_analytics, empty_analytics())


@router.get("/anomalies", response_model=list[LogWithPageResponse], summary="异常日志")
async def log_anomalies(
    db: AsyncSession = Depends(get_db),
):
    """最近 24 小时内最新的 10 条 error / critical 日志"""
    logs = await _run_read(db, "检测异常", get_recent_anomalies, [])
    cipher = get_cipher()
    return [to_log_response(log, cipher) for log in logs]


@router.get("/patterns", response_model=list[MessagePattern], summary="高频日志消息")
async def log_patterns(
    db: AsyncSession = Depends(get_db),
):
    """出现次数最多的 3 条日志消息"""
    return await _run_read(db, "检测日志模式", get_message_patterns, [])


@router.get("/performance", response_model=PerformanceMetrics, summary="性能指标")
async def log_performance(
    db: AsyncSession = Depends(get_db),
):
    """统计慢查询、超时、API 延迟相关日志数量"""
    return await _run_read(
        db,
        "获取性能指标",
        get_performance_metrics,
        {"slow_queries": 0, "timeouts": 0, "api_delays": 0},
    )
