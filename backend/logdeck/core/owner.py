"""
默认归属用户
在还没有真实登录身份之前，页面和日志都归属于这个占位用户。
通过 INSERT ... ON CONFLICT DO NOTHING 按唯一邮箱原子创建，并发首请求不会产生重复用户。
"""

import logging
import secrets

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from logdeck.config import settings
from logdeck.core.security import hash_password
from logdeck.models.base import utcnow
from logdeck.models.user import User

logger = logging.getLogger(__name__)


async def get_default_owner_id(db: AsyncSession) -> int:
    """获取（必要时创建）默认归属用户，返回用户 ID"""
    result = await db.execute(
        select(User.id).where(User.email == settings.DEFAULT_OWNER_EMAIL)
    )
    user_id = result.scalar()
    if user_id is not None:
        return user_id

    stmt = (
        insert(User)
        .values(
            name=settings.DEFAULT_OWNER_NAME,
            email=settings.DEFAULT_OWNER_EMAIL,
            # 占位用户不用于登录，保存随机口令的哈希
            password=hash_password(secrets.token_urlsafe(16)),
            role="user",
            created_at=utcnow(),
        )
        .on_conflict_do_nothing(index_elements=["email"])
    )
    await db.execute(stmt)

    result = await db.execute(
        select(User.id).where(User.email == settings.DEFAULT_OWNER_EMAIL)
    )
    user_id = result.scalar_one()
    logger.info(f"默认归属用户就绪: id={user_id}, email={settings.DEFAULT_OWNER_EMAIL}")
    return user_id
