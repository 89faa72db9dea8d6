"""
日志分析引擎
对日志表做只读聚合：级别分布、错误率、热门页面、异常、高频消息、性能关键词

开启消息加密后，数据库里的 message 是随机 nonce 的密文，无法在 SQL 中分组或匹配，
此时（以及关闭加密后库中仍留有密文时）基于消息内容的统计
会取出全部消息解密后在 Python 中计算。
"""

import logging
import math
from collections import Counter
from datetime import timedelta

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from logdeck.core.crypto import ENCRYPTED_PREFIX, get_cipher
from logdeck.models.base import utcnow
from logdeck.models.log import Log, SEVERITIES
from logdeck.models.page import Page

logger = logging.getLogger(__name__)

# 性能类关键词（不区分大小写的子串匹配）
PERFORMANCE_KEYWORDS = {
    "slow_queries": "slow query",
    "timeouts": "timeout",
    "api_delays": "API delay",
}

TOP_PAGES_LIMIT = 3
PATTERNS_LIMIT = 3
ANOMALY_WINDOW_HOURS = 24
ANOMALY_LIMIT = 10


def _round_half_up(value: float) -> int:
    """四舍五入（round() 是银行家舍入，12.5 会变成 12）"""
    return int(math.floor(value + 0.5))


def empty_analytics() -> dict:
    """日志为空（或日志表不存在）时的分析结果"""
    return {
        "total_logs": 0,
        "error_rate": 0,
        "critical_issues": 0,
        "top_pages": [],
        "severity_distribution": {s: 0 for s in SEVERITIES},
    }


async def get_log_analytics(db: AsyncSession) -> dict:
    """
    汇总日志分析数据

    算法说明:
      1. 级别占比 = round(该级别数量 / 总数 * 100)，五个级别始终存在
      2. 错误率 = round((error + critical) / 总数 * 1000) / 10，保留一位小数
      3. 热门页面 = 按日志数量降序取前 3，名称为 "<emoji> <标题>"

    Returns:
        {"total_logs", "error_rate", "critical_issues", "top_pages", "severity_distribution"}
    """
    result = await db.execute(select(func.count(Log.id)))
    total_logs = result.scalar() or 0
    if total_logs == 0:
        return empty_analytics()

    # 各级别数量
    result = await db.execute(
        select(Log.severity, func.count(Log.id)).group_by(Log.severity)
    )
    severity_counts = {severity: count for severity, count in result.all()}

    distribution = {s: 0 for s in SEVERITIES}
    for severity, count in severity_counts.items():
        distribution[severity] = _round_half_up(count / total_logs * 100)

    error_count = severity_counts.get("error", 0)
    critical_count = severity_counts.get("critical", 0)
    error_rate = _round_half_up((error_count + critical_count) / total_logs * 1000) / 10

    # 热门页面（页面已删除时显示 Unknown Page）
    log_count = func.count(Log.id).label("log_count")
    result = await db.execute(
        select(Log.page_id, log_count, Page.title, Page.emoji)
        .outerjoin(Page, Page.id == Log.page_id)
        .group_by(Log.page_id, Page.title, Page.emoji)
        .order_by(log_count.desc(), Log.page_id)
        .limit(TOP_PAGES_LIMIT)
    )
    top_pages = [
        {
            "id": row.page_id,
            "name": f"{row.emoji} {row.title}" if row.title is not None else "Unknown Page",
            "count": row.log_count,
        }
        for row in result.all()
    ]

    return {
        "total_logs": total_logs,
        "error_rate": error_rate,
        "critical_issues": critical_count,
        "top_pages": top_pages,
        "severity_distribution": distribution,
    }


async def get_recent_anomalies(db: AsyncSession) -> list[Log]:
    """最近 24 小时内最新的 10 条 error / critical 日志"""
    since = utcnow() - timedelta(hours=ANOMALY_WINDOW_HOURS)
    result = await db.execute(
        select(Log)
        .where(Log.severity.in_(["error", "critical"]), Log.timestamp >= since)
        .order_by(Log.timestamp.desc())
        .limit(ANOMALY_LIMIT)
    )
    return list(result.scalars().all())


async def _needs_decryption(db: AsyncSession) -> bool:
    """加密开启，或库中仍有加密写入的旧日志时，需要解密后统计"""
    if get_cipher().enabled:
        return True
    result = await db.execute(
        select(Log.id).where(Log.message.startswith(ENCRYPTED_PREFIX)).limit(1)
    )
    return result.first() is not None


async def _decrypted_messages(db: AsyncSession) -> list[str]:
    cipher = get_cipher()
    result = await db.execute(select(Log.message))
    return [cipher.decrypt(message) for message in result.scalars().all()]


async def get_message_patterns(db: AsyncSession) -> list[dict]:
    """出现次数最多的 3 条日志消息"""
    if await _needs_decryption(db):
        counter = Counter(await _decrypted_messages(db))
        # 次数相同按消息排序，保证结果稳定
        ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
        return [{"message": m, "count": c} for m, c in ranked[:PATTERNS_LIMIT]]

    count_col = func.count(Log.id).label("occurrences")
    result = await db.execute(
        select(Log.message, count_col)
        .group_by(Log.message)
        .order_by(count_col.desc(), Log.message)
        .limit(PATTERNS_LIMIT)
    )
    return [{"message": row.message, "count": row.occurrences} for row in result.all()]


async def get_performance_metrics(db: AsyncSession) -> dict:
    """统计消息中包含性能关键词的日志数量"""
    if await _needs_decryption(db):
        messages = [m.lower() for m in await _decrypted_messages(db)]
        return {
            name: sum(1 for m in messages if keyword.lower() in m)
            for name, keyword in PERFORMANCE_KEYWORDS.items()
        }

    metrics = {}
    for name, keyword in PERFORMANCE_KEYWORDS.items():
        result = await db.execute(
            select(func.count(Log.id)).where(
                func.lower(Log.message).contains(keyword.lower(), autoescape=True)
            )
        )
        metrics[name] = result.scalar() or 0
    return metrics
