"""
数据库初始化数据与检查
供 init_db.py / verify_db.py 脚本调用
"""

import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logdeck.core.crypto import get_cipher
from logdeck.core.errors import is_missing_table
from logdeck.core.owner import get_default_owner_id
from logdeck.models.log import Log
from logdeck.models.page import Page
from logdeck.models.user import User

logger = logging.getLogger(__name__)


async def seed_demo_data(session: AsyncSession) -> dict:
    """
    写入演示数据：默认用户 + 一个测试页面 + 一条 info 日志
    默认用户按邮箱复用，页面和日志每次调用都会新建

    Returns:
        {"user_id": int, "page_id": int, "log_id": int}
    """
    user_id = await get_default_owner_id(session)

    page = Page(title="Test Page", emoji="📝", user_id=user_id)
    session.add(page)
    await session.flush()

    log = Log(
        severity="info",
        message=get_cipher().encrypt("Test log message"),
        page_id=page.id,
        user_id=user_id,
    )
    session.add(log)
    await session.commit()

    logger.info(f"演示数据已写入: user={user_id}, page={page.id}, log={log.id}")
    return {"user_id": user_id, "page_id": page.id, "log_id": log.id}


async def table_counts(session: AsyncSession) -> dict[str, Optional[int]]:
    """各数据表行数，表不存在时为 None"""
    counts: dict[str, Optional[int]] = {}
    for name, model in (("users", User), ("pages", Page), ("logs", Log)):
        try:
            result = await session.execute(select(func.count()).select_from(model))
            counts[name] = result.scalar() or 0
        except SQLAlchemyError as e:
            await session.rollback()
            if not is_missing_table(e):
                raise
            counts[name] = None
    return counts
