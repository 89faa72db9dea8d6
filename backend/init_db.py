"""
初始化数据库：建表并写入演示数据（默认用户、测试页面、一条日志）

用法: python init_db.py [--schema-only]
"""

import argparse
import asyncio
import logging
import os

from logdeck.config import settings
from logdeck.database.connection import async_session_factory, close_db, init_db
from logdeck.database.seed import seed_demo_data

logging.basicConfig(level=logging.INFO, format="%(levelname)-7s | %(message)s")
logger = logging.getLogger("init_db")


async def main(schema_only: bool):
    os.makedirs(os.path.dirname(settings.DATABASE_PATH), exist_ok=True)
    try:
        await init_db()
        logger.info(f"数据表已创建: {settings.DATABASE_PATH}")
        if not schema_only:
            async with async_session_factory() as session:
                ids = await seed_demo_data(session)
            logger.info(f"演示数据: {ids}")
    finally:
        await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="初始化 LogDeck 数据库")
    parser.add_argument("--schema-only", action="store_true", help="只建表，不写演示数据")
    args = parser.parse_args()
    asyncio.run(main(args.schema_only))
