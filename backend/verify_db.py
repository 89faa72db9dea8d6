"""
检查数据库：打印各数据表的行数

用法: python verify_db.py
"""

import asyncio
import logging

from logdeck.config import settings
from logdeck.database.connection import async_session_factory, close_db
from logdeck.database.seed import table_counts

logging.basicConfig(level=logging.INFO, format="%(levelname)-7s | %(message)s")
logger = logging.getLogger("verify_db")


async def main():
    try:
        async with async_session_factory() as session:
            counts = await table_counts(session)
    finally:
        await close_db()

    logger.info(f"数据库: {settings.DATABASE_PATH}")
    for table, count in counts.items():
        if count is None:
            logger.error(f"{table} 表不存在")
        else:
            logger.info(f"{table} 表共 {count} 条记录")


if __name__ == "__main__":
    asyncio.run(main())
