"""
日志保留策略
使用 APScheduler 定期清理超过保留天数的日志
"""

import logging
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logdeck.config import settings
from logdeck.core.errors import is_missing_table
from logdeck.database.connection import async_session_factory
from logdeck.models.base import utcnow
from logdeck.models.log import Log

logger = logging.getLogger(__name__)


async def purge_expired_logs(session: AsyncSession, days: int) -> int:
    """
    删除 timestamp 早于 N 天前的日志

    Returns:
        删除的日志条数（日志表不存在时为 0）
    """
    cutoff = utcnow() - timedelta(days=days)
    try:
        result = await session.execute(delete(Log).where(Log.timestamp < cutoff))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        if is_missing_table(e):
            return 0
        raise
    return result.rowcount or 0


class RetentionScheduler:
    """日志清理调度器"""

    def __init__(self):
        self.scheduler = AsyncIOScheduler(timezone=settings.SCHEDULER_TIMEZONE)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """启动调度器；未配置保留天数时不启动"""
        if self._running:
            return
        if settings.LOG_RETENTION_DAYS <= 0:
            logger.info("未配置日志保留天数，日志将永久保留")
            return

        self.scheduler.add_job(
            self._run_purge,
            IntervalTrigger(minutes=settings.LOG_RETENTION_INTERVAL_MINUTES),
            id="purge_expired_logs",
            name="清理过期日志",
            replace_existing=True,
        )
        self.scheduler.start()
        self._running = True
        logger.info(
            f"日志清理调度器已启动（保留 {settings.LOG_RETENTION_DAYS} 天，"
            f"每 {settings.LOG_RETENTION_INTERVAL_MINUTES} 分钟检查一次）"
        )

    def shutdown(self):
        """关闭调度器"""
        if self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("日志清理调度器已关闭")

    async def _run_purge(self):
        """定时任务入口，单次失败只记录日志，等待下一轮"""
        try:
            async with async_session_factory() as session:
                deleted = await purge_expired_logs(session, settings.LOG_RETENTION_DAYS)
            if deleted:
                logger.info(f"已清理 {deleted} 条过期日志")
        except Exception as e:
            logger.error(f"清理过期日志失败: {e}")


# 全局单例
retention_scheduler = RetentionScheduler()
